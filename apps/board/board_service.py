# apps/board/board_service.py

"""
Serviço de boards, listas, tarefas e membros

Toda mutação registra atividade e emite exatamente um evento após o
commit. Movimentos e reordenações ficam em move_service.
"""

import logging
import re
from typing import Dict, List, Optional

from django.contrib.auth import get_user_model
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.core.exceptions import AcessoNegado, NaoEncontrado, OperacaoInvalida
from apps.core.models import Atividade, Board, Comentario, Lista, MembroBoard, Tarefa
from apps.core.permissions import SincroPermissions
from apps.core.utils import (
    estado_board,
    serializar_atividade,
    serializar_board,
    serializar_comentario,
    serializar_lista,
    serializar_tarefa,
)

from .broadcast import DifusorBoard
from .events import (
    BoardAtualizado,
    ComentarioAdicionado,
    ListaArquivada,
    ListaAtualizada,
    ListaCriada,
    ListaExcluida,
    MembroAdicionado,
    MembroRemovido,
    PapelAtualizado,
    TarefaAtualizada,
    TarefaCriada,
    TarefaExcluida,
)
from .ordering import remover_da_sequencia
from .persistence import carregar, escrita_atomica, gravar_ordem_listas

logger = logging.getLogger(__name__)
Usuario = get_user_model()

PADRAO_COR = re.compile(r'^#[0-9a-fA-F]{6}$')
PAPEIS_MEMBRO = {valor for valor, _ in MembroBoard.PAPEL_CHOICES}
PRIORIDADES = {valor for valor, _ in Tarefa.PRIORIDADE_CHOICES}
STATUS_TAREFA = {valor for valor, _ in Tarefa.STATUS_CHOICES}


def _titulo_valido(titulo, limite, rotulo='Título'):
    titulo = (titulo or '').strip() if isinstance(titulo, str) else ''
    if not titulo:
        raise OperacaoInvalida(f'{rotulo} é obrigatório')
    if len(titulo) > limite:
        raise OperacaoInvalida(f'{rotulo} deve ter no máximo {limite} caracteres')
    return titulo


def _descricao_valida(descricao, limite):
    if descricao is None:
        return ''
    if not isinstance(descricao, str):
        raise OperacaoInvalida('Descrição inválida')
    descricao = descricao.strip()
    if len(descricao) > limite:
        raise OperacaoInvalida(f'Descrição deve ter no máximo {limite} caracteres')
    return descricao


def _cor_valida(cor):
    if not isinstance(cor, str) or not PADRAO_COR.match(cor):
        raise OperacaoInvalida('Cor inválida - use o formato #RRGGBB')
    return cor


def _prazo_valido(valor):
    if valor in (None, ''):
        return None
    prazo = parse_datetime(valor) if isinstance(valor, str) else None
    if prazo is None:
        raise OperacaoInvalida('Prazo inválido - use data/hora ISO 8601')
    if timezone.is_naive(prazo):
        prazo = timezone.make_aware(prazo)
    return prazo


class BoardService:
    """
    Operações de CRUD do board e de seus filhos

    Centraliza validação, permissões, atividade e difusão para que as
    views fiquem apenas com parsing da requisição.
    """

    def __init__(self, difusor: Optional[DifusorBoard] = None):
        self.difusor = difusor or DifusorBoard()

    # === Boards ===

    def listar_boards(self, usuario) -> List[Dict]:
        boards = usuario.get_boards_acessiveis().order_by('-atualizado_em')
        return [serializar_board(b) for b in boards]

    def criar_board(self, usuario, titulo, descricao='', cor_fundo=None, privado=False):
        titulo = _titulo_valido(titulo, 100)
        descricao = _descricao_valida(descricao, 500)

        with escrita_atomica('criar board'):
            board = Board.objects.create(
                titulo=titulo,
                descricao=descricao,
                dono=usuario,
                cor_fundo=_cor_valida(cor_fundo) if cor_fundo else '#0079bf',
                privado=bool(privado),
            )
            board.registrar_atividade(usuario, 'criou o board', f'Criou o board "{board.titulo}"')

        logger.info(f"✅ Board criado: {board.titulo} por {usuario.username}")
        return board

    def obter_estado(self, usuario, board_id) -> Dict:
        """Snapshot completo do board para quem pode visualizá-lo"""
        board = carregar(Board, board_id, 'Board não encontrado')
        papel = SincroPermissions.exigir_leitura(board, usuario)
        return estado_board(board, papel)

    def atualizar_board(self, usuario, board_id, dados, origem=None):
        with escrita_atomica('atualizar board'):
            board = carregar(Board, board_id, 'Board não encontrado')
            SincroPermissions.exigir_papel(board, usuario, 'admin')

            if 'titulo' in dados:
                board.titulo = _titulo_valido(dados['titulo'], 100)
            if 'descricao' in dados:
                board.descricao = _descricao_valida(dados['descricao'], 500)
            if 'cor_fundo' in dados:
                board.cor_fundo = _cor_valida(dados['cor_fundo'])
            if 'privado' in dados:
                board.privado = bool(dados['privado'])

            board.save()
            board.registrar_atividade(usuario, 'atualizou o board', f'Atualizou o board "{board.titulo}"')

            evento = BoardAtualizado(
                board_id=board.id,
                usuario_id=usuario.id,
                board=serializar_board(board),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        return board

    def excluir_board(self, usuario, board_id):
        """Remove o board e, em cascata, listas, tarefas, membros e convites"""
        with escrita_atomica('excluir board'):
            board = carregar(Board, board_id, 'Board não encontrado')
            if board.dono_id != usuario.id:
                SincroPermissions.exigir_papel(board, usuario, 'admin')
            titulo = board.titulo
            board.delete()

        logger.info(f"🗑️ Board excluído: {titulo} por {usuario.username}")

    def arquivar_board(self, usuario, board_id):
        """Alterna o arquivamento; só o dono pode desarquivar"""
        with escrita_atomica('arquivar board'):
            board = carregar(Board, board_id, 'Board não encontrado')

            if board.arquivado:
                if board.dono_id != usuario.id:
                    raise AcessoNegado('Apenas o dono pode restaurar o board')
                board.arquivado = False
            else:
                SincroPermissions.exigir_papel(board, usuario, 'admin')
                board.arquivado = True

            board.save(update_fields=['arquivado', 'atualizado_em'])
            acao = 'arquivou o board' if board.arquivado else 'restaurou o board'
            board.registrar_atividade(usuario, acao, f'{acao.capitalize()} "{board.titulo}"')

            self.difusor.emitir_apos_commit(BoardAtualizado(
                board_id=board.id,
                usuario_id=usuario.id,
                board=serializar_board(board),
            ))

        return board

    # === Listas ===

    def criar_lista(self, usuario, board_id, titulo, cor=None, origem=None):
        """Cria a lista no fim do board (posição máxima + 1)"""
        titulo = _titulo_valido(titulo, 100)

        with escrita_atomica('criar lista'):
            board = carregar(Board, board_id, 'Board não encontrado')
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            lista = Lista.objects.create(
                titulo=titulo,
                board=board,
                cor=_cor_valida(cor) if cor else '#dddddd',
                posicao=Lista.proxima_posicao(board),
            )

            board.ordem_listas = list(board.ordem_listas) + [lista.id]
            board.save(update_fields=['ordem_listas', 'atualizado_em'])
            board.registrar_atividade(usuario, 'criou lista', f'Criou a lista "{lista.titulo}"')

            evento = ListaCriada(
                board_id=board.id,
                usuario_id=usuario.id,
                lista=serializar_lista(lista, []),
                ordem=tuple(board.ordem_listas),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"✅ Lista criada: {lista.titulo} no board {board.id}")
        return lista

    def atualizar_lista(self, usuario, lista_id, dados, origem=None):
        with escrita_atomica('atualizar lista'):
            lista = carregar(Lista, lista_id, 'Lista não encontrada')
            board = lista.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            if 'titulo' in dados:
                lista.titulo = _titulo_valido(dados['titulo'], 100)
            if 'cor' in dados:
                lista.cor = _cor_valida(dados['cor'])

            lista.save()
            board.registrar_atividade(usuario, 'atualizou lista', f'Atualizou a lista "{lista.titulo}"')

            evento = ListaAtualizada(
                board_id=board.id,
                usuario_id=usuario.id,
                lista=serializar_lista(lista),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        return lista

    def arquivar_lista(self, usuario, lista_id, origem=None):
        """
        Alterna o arquivamento da lista

        Arquivar tira a lista de `ordem_listas` e renumera as ativas;
        desarquivar devolve a lista ao fim (posição máxima + 1).
        """
        with escrita_atomica('arquivar lista'):
            lista = carregar(Lista, lista_id, 'Lista não encontrada')
            board = lista.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            if lista.arquivada:
                lista.arquivada = False
                lista.posicao = Lista.proxima_posicao(board)
                lista.save(update_fields=['arquivada', 'posicao', 'atualizado_em'])

                ordem = [i for i in board.ordem_listas if i != lista.id] + [lista.id]
                board.ordem_listas = ordem
                board.save(update_fields=['ordem_listas', 'atualizado_em'])
                acao = 'restaurou lista'
            else:
                lista.arquivada = True
                lista.save(update_fields=['arquivada', 'atualizado_em'])

                ordem = [i for i in board.ordem_listas if i != lista.id]
                gravar_ordem_listas(board, ordem)
                acao = 'arquivou lista'

            board.registrar_atividade(usuario, acao, f'{acao.capitalize()} "{lista.titulo}"')

            evento = ListaArquivada(
                board_id=board.id,
                usuario_id=usuario.id,
                lista_id=lista.id,
                arquivada=lista.arquivada,
                ordem=tuple(board.ordem_listas),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"📦 {usuario.username} {acao} {lista.id} no board {board.id}")
        return lista

    def listas_arquivadas(self, usuario, board_id) -> List[Dict]:
        board = carregar(Board, board_id, 'Board não encontrado')
        SincroPermissions.exigir_leitura(board, usuario)
        return [
            serializar_lista(lista)
            for lista in board.listas.filter(arquivada=True).order_by('-atualizado_em')
        ]

    def excluir_lista(self, usuario, lista_id, origem=None):
        """Exclui a lista e suas tarefas; as irmãs não são renumeradas"""
        with escrita_atomica('excluir lista'):
            lista = carregar(Lista, lista_id, 'Lista não encontrada')
            board = lista.board
            SincroPermissions.exigir_papel(board, usuario, 'admin')

            lista_pk = lista.id
            titulo = lista.titulo
            lista.delete()

            board.ordem_listas = [i for i in board.ordem_listas if i != lista_pk]
            board.save(update_fields=['ordem_listas', 'atualizado_em'])
            board.registrar_atividade(usuario, 'excluiu lista', f'Excluiu a lista "{titulo}"')

            evento = ListaExcluida(
                board_id=board.id,
                usuario_id=usuario.id,
                lista_id=lista_pk,
                ordem=tuple(board.ordem_listas),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"🗑️ Lista excluída: {titulo} do board {board.id}")

    # === Tarefas ===

    def criar_tarefa(self, usuario, lista_id, dados, origem=None):
        """Cria a tarefa no fim da lista (posição máxima + 1)"""
        titulo = _titulo_valido(dados.get('titulo'), 200)
        descricao = _descricao_valida(dados.get('descricao'), 2000)

        with escrita_atomica('criar tarefa'):
            lista = carregar(Lista, lista_id, 'Lista não encontrada')
            board = lista.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            if lista.arquivada:
                raise OperacaoInvalida('Não é possível criar tarefas em uma lista arquivada')

            tarefa = Tarefa(
                titulo=titulo,
                descricao=descricao,
                lista=lista,
                board=board,
                criado_por=usuario,
                posicao=Tarefa.proxima_posicao(lista),
            )
            self._aplicar_campos_tarefa(tarefa, dados)
            tarefa.save()

            lista.ordem_tarefas = list(lista.ordem_tarefas) + [tarefa.id]
            lista.save(update_fields=['ordem_tarefas', 'atualizado_em'])
            board.registrar_atividade(
                usuario, 'criou tarefa', f'Criou a tarefa "{tarefa.titulo}" em "{lista.titulo}"'
            )

            evento = TarefaCriada(
                board_id=board.id,
                usuario_id=usuario.id,
                lista_id=lista.id,
                tarefa=serializar_tarefa(tarefa),
                ordem=tuple(lista.ordem_tarefas),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"✅ Tarefa criada: {tarefa.titulo} na lista {lista.id}")
        return tarefa

    def atualizar_tarefa(self, usuario, tarefa_id, dados, origem=None):
        with escrita_atomica('atualizar tarefa'):
            tarefa = carregar(Tarefa, tarefa_id, 'Tarefa não encontrada')
            board = tarefa.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            if 'titulo' in dados:
                tarefa.titulo = _titulo_valido(dados['titulo'], 200)
            if 'descricao' in dados:
                tarefa.descricao = _descricao_valida(dados['descricao'], 2000)
            self._aplicar_campos_tarefa(tarefa, dados)

            tarefa.save()
            board.registrar_atividade(usuario, 'atualizou tarefa', f'Atualizou a tarefa "{tarefa.titulo}"')

            self._emitir_tarefa_atualizada(tarefa, usuario, origem)

        return tarefa

    def atribuir_responsavel(self, usuario, tarefa_id, responsavel_id, origem=None):
        """O responsável precisa ter algum papel no board"""
        with escrita_atomica('atribuir responsável'):
            tarefa = carregar(Tarefa, tarefa_id, 'Tarefa não encontrada')
            board = tarefa.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            responsavel = carregar(Usuario, responsavel_id, 'Usuário não encontrado')
            if not board.eh_membro(responsavel):
                raise OperacaoInvalida('O responsável precisa ser membro do board')

            tarefa.responsaveis.add(responsavel)
            board.registrar_atividade(
                usuario,
                'atribuiu tarefa',
                f'Atribuiu "{tarefa.titulo}" a {responsavel.nome_exibicao}'
            )
            self._emitir_tarefa_atualizada(tarefa, usuario, origem)

        return tarefa

    def remover_responsavel(self, usuario, tarefa_id, responsavel_id, origem=None):
        with escrita_atomica('remover responsável'):
            tarefa = carregar(Tarefa, tarefa_id, 'Tarefa não encontrada')
            board = tarefa.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            responsavel = carregar(Usuario, responsavel_id, 'Usuário não encontrado')
            tarefa.responsaveis.remove(responsavel)
            board.registrar_atividade(
                usuario,
                'desatribuiu tarefa',
                f'Removeu {responsavel.nome_exibicao} de "{tarefa.titulo}"'
            )
            self._emitir_tarefa_atualizada(tarefa, usuario, origem)

        return tarefa

    def excluir_tarefa(self, usuario, tarefa_id, origem=None):
        """Remove a tarefa da ordem da lista sem renumerar as demais"""
        with escrita_atomica('excluir tarefa'):
            tarefa = carregar(Tarefa, tarefa_id, 'Tarefa não encontrada')
            lista = tarefa.lista
            board = tarefa.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            tarefa_pk = tarefa.id
            titulo = tarefa.titulo
            tarefa.delete()

            if tarefa_pk in lista.ordem_tarefas:
                lista.ordem_tarefas = remover_da_sequencia(lista.ordem_tarefas, tarefa_pk)
                lista.save(update_fields=['ordem_tarefas', 'atualizado_em'])

            board.registrar_atividade(usuario, 'excluiu tarefa', f'Excluiu a tarefa "{titulo}"')

            evento = TarefaExcluida(
                board_id=board.id,
                usuario_id=usuario.id,
                tarefa_id=tarefa_pk,
                lista_id=lista.id,
                ordem=tuple(lista.ordem_tarefas),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"🗑️ Tarefa excluída: {titulo} da lista {lista.id}")

    def obter_tarefa(self, usuario, tarefa_id) -> Dict:
        """Detalhe da tarefa com a lista, o board e os comentários"""
        tarefa = carregar(Tarefa, tarefa_id, 'Tarefa não encontrada')
        SincroPermissions.exigir_leitura(tarefa.board, usuario)

        dados = serializar_tarefa(tarefa)
        dados['lista'] = {'id': tarefa.lista_id, 'titulo': tarefa.lista.titulo}
        dados['board'] = {'id': tarefa.board_id, 'titulo': tarefa.board.titulo}
        dados['comentarios'] = [
            serializar_comentario(c) for c in tarefa.comentarios.select_related('autor')
        ]
        return dados

    def comentar_tarefa(self, usuario, tarefa_id, texto, origem=None):
        texto = _titulo_valido(texto, 1000, rotulo='Comentário')

        with escrita_atomica('comentar tarefa'):
            tarefa = carregar(Tarefa, tarefa_id, 'Tarefa não encontrada')
            board = tarefa.board
            SincroPermissions.exigir_papel(board, usuario, 'membro')

            comentario = Comentario.objects.create(tarefa=tarefa, autor=usuario, texto=texto)
            board.registrar_atividade(usuario, 'comentou tarefa', f'Comentou na tarefa "{tarefa.titulo}"')

            evento = ComentarioAdicionado(
                board_id=board.id,
                usuario_id=usuario.id,
                tarefa_id=tarefa.id,
                comentario=serializar_comentario(comentario),
            )
            self.difusor.emitir_apos_commit(evento, origem)

        logger.info(f"💬 {usuario.username} comentou na tarefa {tarefa.id}")
        return comentario

    def _aplicar_campos_tarefa(self, tarefa, dados):
        if 'prioridade' in dados:
            if dados['prioridade'] not in PRIORIDADES:
                raise OperacaoInvalida('Prioridade inválida')
            tarefa.prioridade = dados['prioridade']

        if 'status' in dados:
            if dados['status'] not in STATUS_TAREFA:
                raise OperacaoInvalida('Status inválido')
            tarefa.status = dados['status']
            if tarefa.status == 'concluida' and not tarefa.concluida:
                tarefa.marcar_concluida()
            elif tarefa.status != 'concluida' and tarefa.concluida:
                tarefa.concluida = False
                tarefa.concluida_em = None

        if 'prazo' in dados:
            tarefa.prazo = _prazo_valido(dados['prazo'])

        if 'concluida' in dados:
            if dados['concluida'] and not tarefa.concluida:
                tarefa.marcar_concluida()
            elif not dados['concluida'] and tarefa.concluida:
                tarefa.marcar_pendente()

        if 'arquivada' in dados:
            tarefa.arquivada = bool(dados['arquivada'])

    def _emitir_tarefa_atualizada(self, tarefa, usuario, origem):
        evento = TarefaAtualizada(
            board_id=tarefa.board_id,
            usuario_id=usuario.id,
            tarefa=serializar_tarefa(tarefa),
        )
        self.difusor.emitir_apos_commit(evento, origem)

    # === Membros ===

    def adicionar_membro(self, usuario, board_id, email, papel='membro'):
        if papel not in PAPEIS_MEMBRO:
            raise OperacaoInvalida('Papel inválido')

        with escrita_atomica('adicionar membro'):
            board = carregar(Board, board_id, 'Board não encontrado')
            SincroPermissions.exigir_papel(board, usuario, 'admin')

            novo = Usuario.objects.filter(email__iexact=(email or '').strip()).first()
            if novo is None:
                raise NaoEncontrado('Usuário não encontrado')
            if board.eh_membro(novo):
                raise OperacaoInvalida('Usuário já é membro do board')

            membro = board.adicionar_membro(novo, papel)
            board.registrar_atividade(
                usuario, 'adicionou membro', f'Adicionou {novo.nome_exibicao} como {papel}'
            )

            self.difusor.emitir_apos_commit(MembroAdicionado(
                board_id=board.id,
                usuario_id=usuario.id,
                membro_id=novo.id,
                papel=papel,
            ))

        logger.info(f"👥 {novo.username} adicionado ao board {board.id} como {papel}")
        return membro

    def alterar_papel(self, usuario, board_id, membro_id, papel):
        if papel not in PAPEIS_MEMBRO:
            raise OperacaoInvalida('Papel inválido')

        with escrita_atomica('alterar papel'):
            board = carregar(Board, board_id, 'Board não encontrado')
            SincroPermissions.exigir_papel(board, usuario, 'admin')

            if str(board.dono_id) == str(membro_id):
                raise OperacaoInvalida('O papel do dono não pode ser alterado')

            membro = self._membro(board, membro_id)

            membro.papel = papel
            membro.save(update_fields=['papel'])
            board.registrar_atividade(
                usuario, 'alterou papel', f'Alterou o papel de {membro.usuario.nome_exibicao} para {papel}'
            )

            self.difusor.emitir_apos_commit(PapelAtualizado(
                board_id=board.id,
                usuario_id=usuario.id,
                membro_id=membro.usuario_id,
                papel=papel,
            ))

        return membro

    def remover_membro(self, usuario, board_id, membro_id):
        """
        Remove um membro (admin) ou a si mesmo; o dono não pode sair.
        As atribuições do membro nas tarefas do board são desfeitas.
        """
        with escrita_atomica('remover membro'):
            board = carregar(Board, board_id, 'Board não encontrado')

            if str(board.dono_id) == str(membro_id):
                raise OperacaoInvalida('O dono não pode ser removido do board')

            if str(usuario.id) != str(membro_id):
                SincroPermissions.exigir_papel(board, usuario, 'admin')

            membro = self._membro(board, membro_id)

            alvo = membro.usuario
            membro.delete()
            Tarefa.responsaveis.through.objects.filter(tarefa__board=board, usuario=alvo).delete()

            board.registrar_atividade(usuario, 'removeu membro', f'Removeu {alvo.nome_exibicao} do board')

            self.difusor.emitir_apos_commit(MembroRemovido(
                board_id=board.id,
                usuario_id=usuario.id,
                membro_id=alvo.id,
            ))

        logger.info(f"👥 {alvo.username} removido do board {board.id}")

    @staticmethod
    def _membro(board, membro_id):
        try:
            return board.membros.select_related('usuario').get(usuario_id=membro_id)
        except (MembroBoard.DoesNotExist, ValueError, TypeError):
            raise NaoEncontrado('Membro não encontrado')

    # === Atividades ===

    def atividades(self, usuario, board_id) -> List[Dict]:
        """Histórico do board, mais recentes primeiro"""
        board = carregar(Board, board_id, 'Board não encontrado')
        SincroPermissions.exigir_leitura(board, usuario)
        consulta = Atividade.objects.filter(board=board).select_related('usuario')
        return [serializar_atividade(a) for a in consulta]


# Instância global do serviço
board_service = BoardService()
