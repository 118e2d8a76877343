# apps/board/tests/fabrica.py

"""Dados de teste e difusor que apenas registra o que foi emitido"""

from apps.board.broadcast import DifusorBoard
from apps.core.models import Board, Lista, Tarefa, Usuario


class DifusorFalso(DifusorBoard):
    """Mantém a semântica de on_commit, mas grava em memória"""

    def __init__(self):
        super().__init__(channel_layer=object())
        self.emitidos = []
        self.notificacoes = []

    def emitir(self, evento, origem=None):
        self.emitidos.append((evento, origem))

    def notificar_usuario(self, usuario_id, evento):
        self.notificacoes.append((usuario_id, evento))

    @property
    def tipos(self):
        return [evento.tipo for evento, _ in self.emitidos]


def criar_usuario(username, **extra):
    extra.setdefault('email', f'{username}@sincro.test')
    return Usuario.objects.create_user(username=username, password='senha-teste', **extra)


def criar_board(dono, titulo='Projeto', **extra):
    return Board.objects.create(titulo=titulo, dono=dono, **extra)


def criar_lista(board, titulo, tarefas=(), criado_por=None):
    """Lista no fim do board, com as tarefas na ordem dada"""
    lista = Lista.objects.create(board=board, titulo=titulo, posicao=Lista.proxima_posicao(board))
    board.ordem_listas = list(board.ordem_listas) + [lista.id]
    board.save(update_fields=['ordem_listas'])

    for titulo_tarefa in tarefas:
        criar_tarefa(lista, titulo_tarefa, criado_por or board.dono)
    return lista


def criar_tarefa(lista, titulo, criado_por):
    tarefa = Tarefa.objects.create(
        titulo=titulo,
        lista=lista,
        board=lista.board,
        criado_por=criado_por,
        posicao=Tarefa.proxima_posicao(lista),
    )
    lista.ordem_tarefas = list(lista.ordem_tarefas) + [tarefa.id]
    lista.save(update_fields=['ordem_tarefas'])
    return tarefa


def titulos_por_posicao(lista):
    """Títulos das tarefas na ordem derivada das posições"""
    return list(lista.tarefas_ordenadas().values_list('titulo', flat=True))


def titulos_da_ordem(lista):
    """Títulos das tarefas na ordem explícita da lista"""
    lista.refresh_from_db()
    por_id = dict(Tarefa.objects.filter(id__in=lista.ordem_tarefas).values_list('id', 'titulo'))
    return [por_id[i] for i in lista.ordem_tarefas]
