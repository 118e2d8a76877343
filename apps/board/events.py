# apps/board/events.py

"""
Eventos em tempo real do board

Um tipo explícito por evento. Cada evento vira um dicionário
`{'tipo': ..., **campos}` para trafegar pelo WebSocket, e
`evento_de_mensagem` faz o caminho inverso rejeitando tipos
desconhecidos. Eventos de ordem sempre carregam a ordem completa,
nunca um delta.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import ClassVar, Dict, Optional, Tuple, Type


TIPOS_EVENTO: Dict[str, Type['EventoBoard']] = {}


def registrar_evento(cls):
    """Decorador que registra a classe pelo seu `tipo`"""
    if cls.tipo in TIPOS_EVENTO:
        raise ValueError(f'Tipo de evento duplicado: {cls.tipo}')
    TIPOS_EVENTO[cls.tipo] = cls
    return cls


@dataclass(frozen=True)
class EventoBoard:
    """Base: todo evento pertence a um board e tem um autor (opcional)"""

    tipo: ClassVar[str] = ''

    board_id: int
    usuario_id: Optional[int]

    def para_mensagem(self) -> dict:
        mensagem = {'tipo': self.tipo}
        for nome, valor in asdict(self).items():
            mensagem[nome] = list(valor) if isinstance(valor, tuple) else valor
        return mensagem


def evento_de_mensagem(mensagem: dict) -> EventoBoard:
    """Reconstrói o evento tipado a partir do dicionário recebido"""
    tipo = mensagem.get('tipo')
    cls = TIPOS_EVENTO.get(tipo)
    if cls is None:
        raise ValueError(f'Tipo de evento desconhecido: {tipo!r}')

    dados = {}
    for campo in fields(cls):
        if campo.name not in mensagem:
            raise ValueError(f'Campo {campo.name!r} ausente no evento {tipo}')
        valor = mensagem[campo.name]
        dados[campo.name] = tuple(valor) if isinstance(valor, list) else valor
    return cls(**dados)


# === Ordem ===

@registrar_evento
@dataclass(frozen=True)
class ListasReordenadas(EventoBoard):
    tipo: ClassVar[str] = 'listas_reordenadas'

    ordem: Tuple[int, ...] = ()


@registrar_evento
@dataclass(frozen=True)
class TarefasReordenadas(EventoBoard):
    tipo: ClassVar[str] = 'tarefas_reordenadas'

    lista_id: int = 0
    ordem: Tuple[int, ...] = ()


@registrar_evento
@dataclass(frozen=True)
class TarefaMovida(EventoBoard):
    tipo: ClassVar[str] = 'tarefa_movida'

    tarefa_id: int = 0
    lista_origem: int = 0
    lista_destino: int = 0
    ordem_origem: Tuple[int, ...] = ()
    ordem_destino: Tuple[int, ...] = ()


# === Listas ===

@registrar_evento
@dataclass(frozen=True)
class ListaCriada(EventoBoard):
    tipo: ClassVar[str] = 'lista_criada'

    lista: dict = field(default_factory=dict)
    ordem: Tuple[int, ...] = ()


@registrar_evento
@dataclass(frozen=True)
class ListaAtualizada(EventoBoard):
    tipo: ClassVar[str] = 'lista_atualizada'

    lista: dict = field(default_factory=dict)


@registrar_evento
@dataclass(frozen=True)
class ListaArquivada(EventoBoard):
    tipo: ClassVar[str] = 'lista_arquivada'

    lista_id: int = 0
    arquivada: bool = True
    ordem: Tuple[int, ...] = ()


@registrar_evento
@dataclass(frozen=True)
class ListaExcluida(EventoBoard):
    tipo: ClassVar[str] = 'lista_excluida'

    lista_id: int = 0
    ordem: Tuple[int, ...] = ()


# === Tarefas ===

@registrar_evento
@dataclass(frozen=True)
class TarefaCriada(EventoBoard):
    tipo: ClassVar[str] = 'tarefa_criada'

    lista_id: int = 0
    tarefa: dict = field(default_factory=dict)
    ordem: Tuple[int, ...] = ()


@registrar_evento
@dataclass(frozen=True)
class TarefaAtualizada(EventoBoard):
    tipo: ClassVar[str] = 'tarefa_atualizada'

    tarefa: dict = field(default_factory=dict)


@registrar_evento
@dataclass(frozen=True)
class TarefaExcluida(EventoBoard):
    tipo: ClassVar[str] = 'tarefa_excluida'

    tarefa_id: int = 0
    lista_id: int = 0
    ordem: Tuple[int, ...] = ()


@registrar_evento
@dataclass(frozen=True)
class ComentarioAdicionado(EventoBoard):
    tipo: ClassVar[str] = 'comentario_adicionado'

    tarefa_id: int = 0
    comentario: dict = field(default_factory=dict)


# === Board e membros ===

@registrar_evento
@dataclass(frozen=True)
class BoardAtualizado(EventoBoard):
    tipo: ClassVar[str] = 'board_atualizado'

    board: dict = field(default_factory=dict)


@registrar_evento
@dataclass(frozen=True)
class MembroAdicionado(EventoBoard):
    tipo: ClassVar[str] = 'membro_adicionado'

    membro_id: int = 0
    papel: str = 'membro'


@registrar_evento
@dataclass(frozen=True)
class MembroRemovido(EventoBoard):
    tipo: ClassVar[str] = 'membro_removido'

    membro_id: int = 0


@registrar_evento
@dataclass(frozen=True)
class PapelAtualizado(EventoBoard):
    tipo: ClassVar[str] = 'papel_atualizado'

    membro_id: int = 0
    papel: str = 'membro'


# === Presença ===

@registrar_evento
@dataclass(frozen=True)
class UsuarioEntrou(EventoBoard):
    tipo: ClassVar[str] = 'usuario_entrou'

    nome: str = ''


@registrar_evento
@dataclass(frozen=True)
class UsuarioSaiu(EventoBoard):
    tipo: ClassVar[str] = 'usuario_saiu'

    nome: str = ''


@registrar_evento
@dataclass(frozen=True)
class CursorMovido(EventoBoard):
    tipo: ClassVar[str] = 'cursor_movido'

    nome: str = ''
    x: float = 0
    y: float = 0
    cor: str = ''


# === Convites (canal pessoal do usuário) ===

@registrar_evento
@dataclass(frozen=True)
class ConviteRecebido(EventoBoard):
    tipo: ClassVar[str] = 'convite_recebido'

    convite_id: int = 0
    mensagem: str = ''


@registrar_evento
@dataclass(frozen=True)
class ConviteRespondido(EventoBoard):
    tipo: ClassVar[str] = 'convite_respondido'

    convite_id: int = 0
    status: str = ''
    mensagem: str = ''
