# apps/board/move_service.py

"""
Serviço de movimentação - reordenar e mover listas e tarefas

Fluxo de cada operação:
1. valida existência, pertencimento e papel (>= membro)
2. calcula a nova sequência e renumera 0..n-1
3. grava sequência(s) e posições numa única transação
4. após o commit, difunde a ordem completa para o grupo do board,
   exceto para a sessão que originou a mudança
"""

import logging
from typing import Optional

from apps.core.exceptions import NaoEncontrado, OperacaoInvalida
from apps.core.models import Board, Lista, Tarefa
from apps.core.permissions import SincroPermissions

from .broadcast import DifusorBoard
from .events import ListasReordenadas, TarefaMovida, TarefasReordenadas
from .ordering import (
    inserir_entre_visiveis,
    mover_entre_visiveis,
    mover_na_sequencia,
    permutar_visiveis,
    remover_da_sequencia,
    validar_ids,
    validar_permutacao,
)
from .persistence import carregar, escrita_atomica, gravar_ordem_listas, gravar_ordem_tarefas

logger = logging.getLogger(__name__)


class MovimentoService:
    """
    Aplica de forma autoritativa os movimentos feitos no drag-and-drop

    O difusor é injetado; sem ele, usa o channel layer padrão.
    """

    def __init__(self, difusor: Optional[DifusorBoard] = None):
        self.difusor = difusor or DifusorBoard()

    # === Tarefas ===

    def mover_tarefa(self, usuario, tarefa_id, origem_id, destino_id, indice, origem=None):
        """
        Move uma tarefa para `indice` na lista de destino

        O índice conta apenas as tarefas não arquivadas, como o cliente as
        exibe; as arquivadas seguem na ordem sem ocupar posição visível.

        Com origem == destino é uma reordenação dentro da lista; caso
        contrário a tarefa sai da origem, entra no destino e troca de
        lista, tudo na mesma transação.

        Returns:
            TarefasReordenadas ou TarefaMovida com a ordem canônica
        """
        indice = self._normalizar_indice(indice)

        with escrita_atomica('mover tarefa'):
            tarefa = carregar(Tarefa, tarefa_id, 'Tarefa não encontrada')
            lista_origem = carregar(Lista, origem_id, 'Lista de origem não encontrada')
            board = lista_origem.board

            SincroPermissions.exigir_papel(board, usuario, 'membro')

            if tarefa.lista_id != lista_origem.id or tarefa.id not in lista_origem.ordem_tarefas:
                raise NaoEncontrado('A tarefa não pertence à lista de origem')

            if str(destino_id) == str(origem_id):
                nova_ordem = mover_entre_visiveis(
                    lista_origem.ordem_tarefas, tarefa.id, indice, self._arquivadas(lista_origem)
                )
                gravar_ordem_tarefas(lista_origem, nova_ordem)

                evento = TarefasReordenadas(
                    board_id=board.id,
                    usuario_id=usuario.id,
                    lista_id=lista_origem.id,
                    ordem=tuple(nova_ordem),
                )
            else:
                lista_destino = carregar(Lista, destino_id, 'Lista de destino não encontrada')

                if lista_destino.board_id != lista_origem.board_id:
                    raise OperacaoInvalida('Tarefas não podem ser movidas para outro board')
                if lista_destino.arquivada:
                    raise OperacaoInvalida('A lista de destino está arquivada')

                ordem_origem = remover_da_sequencia(lista_origem.ordem_tarefas, tarefa.id)
                ordem_destino = inserir_entre_visiveis(
                    lista_destino.ordem_tarefas, tarefa.id, indice, self._arquivadas(lista_destino)
                )

                tarefa.lista = lista_destino
                tarefa.save(update_fields=['lista', 'atualizado_em'])

                gravar_ordem_tarefas(lista_origem, ordem_origem)
                gravar_ordem_tarefas(lista_destino, ordem_destino)

                board.registrar_atividade(
                    usuario,
                    'moveu tarefa',
                    f'Moveu a tarefa "{tarefa.titulo}" de "{lista_origem.titulo}" para "{lista_destino.titulo}"'
                )

                evento = TarefaMovida(
                    board_id=board.id,
                    usuario_id=usuario.id,
                    tarefa_id=tarefa.id,
                    lista_origem=lista_origem.id,
                    lista_destino=lista_destino.id,
                    ordem_origem=tuple(ordem_origem),
                    ordem_destino=tuple(ordem_destino),
                )

            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"🔀 {usuario.username} - {evento.tipo} tarefa {tarefa.id} no board {board.id}")
        return evento

    def reordenar_tarefas(self, usuario, lista_id, tarefa_ids, origem=None):
        """
        Regrava a ordem completa de uma lista

        `tarefa_ids` é uma permutação das tarefas visíveis (as arquivadas
        ficam onde estão) ou da ordem completa.
        """
        ids = validar_ids(tarefa_ids)

        with escrita_atomica('reordenar tarefas'):
            lista = carregar(Lista, lista_id, 'Lista não encontrada')
            board = lista.board

            SincroPermissions.exigir_papel(board, usuario, 'membro')

            nova_ordem = permutar_visiveis(lista.ordem_tarefas, ids, self._arquivadas(lista))
            gravar_ordem_tarefas(lista, nova_ordem)

            evento = TarefasReordenadas(
                board_id=board.id,
                usuario_id=usuario.id,
                lista_id=lista.id,
                ordem=tuple(nova_ordem),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"🔀 {usuario.username} reordenou tarefas da lista {lista.id}")
        return evento

    # === Listas ===

    def mover_lista(self, usuario, lista_id, board_id, indice, origem=None):
        """Move uma lista ativa para `indice` dentro do próprio board"""
        indice = self._normalizar_indice(indice)

        with escrita_atomica('mover lista'):
            lista = carregar(Lista, lista_id, 'Lista não encontrada')
            board = carregar(Board, board_id, 'Board não encontrado')

            SincroPermissions.exigir_papel(board, usuario, 'membro')

            if lista.board_id != board.id:
                raise NaoEncontrado('A lista não pertence a este board')
            if lista.arquivada:
                raise OperacaoInvalida('Listas arquivadas não podem ser reordenadas')

            nova_ordem = mover_na_sequencia(board.ordem_listas, lista.id, indice)
            gravar_ordem_listas(board, nova_ordem)

            evento = ListasReordenadas(
                board_id=board.id,
                usuario_id=usuario.id,
                ordem=tuple(nova_ordem),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"🔀 {usuario.username} moveu a lista {lista.id} no board {board.id}")
        return evento

    def reordenar_listas(self, usuario, board_id, lista_ids, origem=None):
        """
        Regrava a ordem das listas ativas do board

        `lista_ids` precisa ser uma permutação exata das listas ativas.
        """
        ids = validar_ids(lista_ids)

        with escrita_atomica('reordenar listas'):
            board = carregar(Board, board_id, 'Board não encontrado')

            SincroPermissions.exigir_papel(board, usuario, 'membro')

            nova_ordem = validar_permutacao(board.ordem_listas, ids)
            gravar_ordem_listas(board, nova_ordem)

            evento = ListasReordenadas(
                board_id=board.id,
                usuario_id=usuario.id,
                ordem=tuple(nova_ordem),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"🔀 {usuario.username} reordenou as listas do board {board.id}")
        return evento

    # === Auxiliares ===

    @staticmethod
    def _arquivadas(lista):
        return set(lista.tarefas.filter(arquivada=True).values_list('id', flat=True))

    @staticmethod
    def _normalizar_indice(indice):
        if isinstance(indice, bool):
            raise OperacaoInvalida('Índice de destino inválido')
        try:
            return int(indice)
        except (TypeError, ValueError):
            raise OperacaoInvalida('Índice de destino inválido')


# Instância global do serviço (padrão dos demais serviços)
movimento_service = MovimentoService()
