# apps/board/client_state.py

"""
Estado do board no lado do cliente e ciclo de vida de um movimento

O cliente aplica o drag-and-drop imediatamente (otimista) e só depois
recebe a resposta do servidor. `MaquinaMovimento` torna esse ciclo
explícito:

    OCIOSO -> OTIMISTA -> CONFIRMADO -> OCIOSO
                       -> REVERTIDO  -> OCIOSO

Nada aqui depende de rede ou banco; a camada de transporte só chama
iniciar/confirmar/reverter/receber_evento.
"""

import copy
import logging
from enum import Enum
from typing import Dict, List, Optional, Set, Union

from .events import (
    EventoBoard,
    ListaArquivada,
    ListaCriada,
    ListaExcluida,
    ListasReordenadas,
    TarefaAtualizada,
    TarefaCriada,
    TarefaExcluida,
    TarefaMovida,
    TarefasReordenadas,
    evento_de_mensagem,
)
from .ordering import inserir_entre_visiveis, mover_entre_visiveis, mover_na_sequencia, remover_da_sequencia

logger = logging.getLogger(__name__)


class FaseMovimento(Enum):
    OCIOSO = 'ocioso'
    OTIMISTA = 'otimista'
    CONFIRMADO = 'confirmado'
    REVERTIDO = 'revertido'


class TransicaoInvalida(RuntimeError):
    """Chamada fora da fase esperada (ex.: dois movimentos simultâneos)"""


class EstadoBoardCliente:
    """
    Ordem das listas e das tarefas de cada lista, como o cliente as vê

    `ordem_tarefas` guarda a ordem completa; `arquivadas` são os ids que
    ficam ocultos. Índices de drag-and-drop contam só as visíveis.
    """

    def __init__(self, ordem_listas=None, ordem_tarefas=None, arquivadas=None):
        self.ordem_listas: List[int] = list(ordem_listas or [])
        self.ordem_tarefas: Dict[int, List[int]] = {
            int(lista_id): list(ids) for lista_id, ids in (ordem_tarefas or {}).items()
        }
        self.arquivadas: Set[int] = set(arquivadas or ())

    @classmethod
    def de_snapshot(cls, dados: dict) -> 'EstadoBoardCliente':
        """Monta o estado a partir do snapshot de `estado_board`/`sync_board`"""
        return cls(
            ordem_listas=[lista['id'] for lista in dados.get('listas', [])],
            ordem_tarefas={
                lista['id']: lista.get('ordem_tarefas', [])
                for lista in dados.get('listas', [])
            },
            arquivadas=[
                tarefa_id
                for lista in dados.get('listas', [])
                for tarefa_id in lista.get('tarefas_arquivadas', [])
            ],
        )

    def copiar(self) -> 'EstadoBoardCliente':
        return EstadoBoardCliente(self.ordem_listas, copy.deepcopy(self.ordem_tarefas), self.arquivadas)

    def __eq__(self, outro):
        if not isinstance(outro, EstadoBoardCliente):
            return NotImplemented
        return (
            self.ordem_listas == outro.ordem_listas
            and self.ordem_tarefas == outro.ordem_tarefas
            and self.arquivadas == outro.arquivadas
        )

    def __repr__(self):
        return f'EstadoBoardCliente(listas={self.ordem_listas}, tarefas={self.ordem_tarefas})'

    # === Mutações locais (drag-and-drop) ===

    def mover_tarefa(self, tarefa_id, origem_id, destino_id, indice):
        if origem_id == destino_id:
            self.ordem_tarefas[origem_id] = mover_entre_visiveis(
                self.ordem_tarefas.get(origem_id, []), tarefa_id, indice, self.arquivadas
            )
            return

        self.ordem_tarefas[origem_id] = remover_da_sequencia(
            self.ordem_tarefas.get(origem_id, []), tarefa_id
        )
        self.ordem_tarefas[destino_id] = inserir_entre_visiveis(
            self.ordem_tarefas.get(destino_id, []), tarefa_id, indice, self.arquivadas
        )

    def mover_lista(self, lista_id, indice):
        self.ordem_listas = mover_na_sequencia(self.ordem_listas, lista_id, indice)

    # === Eventos do servidor ===

    def aplicar_evento(self, evento: EventoBoard) -> bool:
        """
        Substitui a ordem afetada pela ordem completa do evento

        Returns:
            False para eventos que não mexem em ordem nem no que é visível
        """
        if isinstance(evento, ListasReordenadas):
            self.ordem_listas = list(evento.ordem)
        elif isinstance(evento, TarefasReordenadas):
            self.ordem_tarefas[evento.lista_id] = list(evento.ordem)
        elif isinstance(evento, TarefaMovida):
            self.ordem_tarefas[evento.lista_origem] = list(evento.ordem_origem)
            self.ordem_tarefas[evento.lista_destino] = list(evento.ordem_destino)
        elif isinstance(evento, ListaCriada):
            self.ordem_listas = list(evento.ordem)
            self.ordem_tarefas[evento.lista['id']] = list(evento.lista.get('ordem_tarefas', []))
        elif isinstance(evento, ListaArquivada):
            self.ordem_listas = list(evento.ordem)
            self.ordem_tarefas.setdefault(evento.lista_id, [])
        elif isinstance(evento, ListaExcluida):
            self.ordem_listas = list(evento.ordem)
            self.ordem_tarefas.pop(evento.lista_id, None)
        elif isinstance(evento, (TarefaCriada, TarefaExcluida)):
            self.ordem_tarefas[evento.lista_id] = list(evento.ordem)
            if isinstance(evento, TarefaExcluida):
                self.arquivadas.discard(evento.tarefa_id)
        elif isinstance(evento, TarefaAtualizada):
            # arquivar muda o que é visível, não a ordem
            if evento.tarefa.get('arquivada'):
                self.arquivadas.add(evento.tarefa['id'])
            else:
                self.arquivadas.discard(evento.tarefa.get('id'))
        else:
            return False
        return True


class MaquinaMovimento:
    """
    Um movimento por vez, com rollback como transição de primeira classe

    `confirmado` é o último estado aceito pelo servidor; `exibido` é o que
    a interface mostra. Fora de um movimento os dois são iguais.
    """

    def __init__(self, estado: EstadoBoardCliente):
        self.confirmado = estado.copiar()
        self.exibido = estado.copiar()
        self.fase = FaseMovimento.OCIOSO
        self.ultimo_desfecho: Optional[FaseMovimento] = None
        self.ultimo_erro = None

    @property
    def em_andamento(self):
        return self.fase is FaseMovimento.OTIMISTA

    def _exigir_fase(self, fase):
        if self.fase is not fase:
            raise TransicaoInvalida(f'Esperado {fase.value}, fase atual {self.fase.value}')

    def iniciar_movimento_tarefa(self, tarefa_id, origem_id, destino_id, indice):
        """Aplica o movimento na visão; o estado confirmado fica intacto"""
        self._exigir_fase(FaseMovimento.OCIOSO)
        proposto = self.exibido.copiar()
        proposto.mover_tarefa(tarefa_id, origem_id, destino_id, indice)
        self.exibido = proposto
        self.fase = FaseMovimento.OTIMISTA

    def iniciar_movimento_lista(self, lista_id, indice):
        self._exigir_fase(FaseMovimento.OCIOSO)
        proposto = self.exibido.copiar()
        proposto.mover_lista(lista_id, indice)
        self.exibido = proposto
        self.fase = FaseMovimento.OTIMISTA

    def confirmar(self, evento: Union[EventoBoard, dict, None] = None) -> FaseMovimento:
        """
        O servidor aceitou: a ordem devolvida passa a ser a confirmada

        Sem evento, a visão otimista é adotada como confirmada.
        """
        self._exigir_fase(FaseMovimento.OTIMISTA)

        if evento is None:
            self.confirmado = self.exibido.copiar()
        else:
            if isinstance(evento, dict):
                evento = evento_de_mensagem(evento)
            self.confirmado.aplicar_evento(evento)
            self.exibido = self.confirmado.copiar()

        return self._encerrar(FaseMovimento.CONFIRMADO)

    def reverter(self, erro=None) -> FaseMovimento:
        """O servidor recusou: volta ao último estado confirmado"""
        self._exigir_fase(FaseMovimento.OTIMISTA)
        self.exibido = self.confirmado.copiar()
        self.ultimo_erro = erro
        logger.warning(f"↩️ Movimento revertido: {erro}")
        return self._encerrar(FaseMovimento.REVERTIDO)

    def receber_evento(self, evento: Union[EventoBoard, dict]):
        """
        Evento de outra sessão

        Em repouso atualiza visão e confirmado; durante um movimento só o
        confirmado muda, para que um rollback volte ao estado mais novo.
        """
        if isinstance(evento, dict):
            evento = evento_de_mensagem(evento)

        if not self.confirmado.aplicar_evento(evento):
            return
        if self.fase is FaseMovimento.OCIOSO:
            self.exibido = self.confirmado.copiar()

    def _encerrar(self, desfecho):
        self.ultimo_desfecho = desfecho
        self.fase = FaseMovimento.OCIOSO
        return desfecho
