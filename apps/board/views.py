# apps/board/views.py

"""
API JSON do board

As views só fazem parsing da requisição; validação, permissões,
atividade e difusão ficam nos serviços. Erros de domínio (ErroBoard)
são convertidos em JSON pelo ErroBoardMiddleware.

O header configurado em SINCRO_SOCKET_HEADER identifica a sessão
WebSocket de quem fez a chamada, que não recebe o próprio eco.
"""

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.permissions import requer_login_api
from apps.core.utils import (
    corpo_json,
    exigir_campo,
    serializar_board,
    serializar_comentario,
    serializar_lista,
    serializar_tarefa,
)

from .board_service import board_service
from .move_service import movimento_service


def _origem(request):
    """Channel name da sessão WebSocket do autor, se informado"""
    return request.headers.get(settings.SINCRO_SOCKET_HEADER) or None


def _ok(status=200, **dados):
    return JsonResponse({'success': True, **dados}, status=status)


# === Boards ===

@requer_login_api
@require_http_methods(["GET", "POST"])
def boards_view(request):
    """GET lista boards acessíveis; POST cria um board"""
    if request.method == 'GET':
        return _ok(boards=board_service.listar_boards(request.user))

    dados = corpo_json(request)
    board = board_service.criar_board(
        request.user,
        dados.get('titulo'),
        descricao=dados.get('descricao', ''),
        cor_fundo=dados.get('cor_fundo'),
        privado=dados.get('privado', False),
    )
    return _ok(status=201, board=serializar_board(board))


@requer_login_api
@require_http_methods(["GET", "PATCH", "DELETE"])
def board_detalhe_view(request, board_id):
    """Estado completo, atualização ou exclusão do board"""
    if request.method == 'GET':
        return _ok(board=board_service.obter_estado(request.user, board_id))

    if request.method == 'PATCH':
        board = board_service.atualizar_board(
            request.user, board_id, corpo_json(request), origem=_origem(request)
        )
        return _ok(board=serializar_board(board))

    board_service.excluir_board(request.user, board_id)
    return _ok()


@requer_login_api
@require_POST
def arquivar_board_view(request, board_id):
    board = board_service.arquivar_board(request.user, board_id)
    return _ok(board=serializar_board(board))


@requer_login_api
@require_GET
def atividades_view(request, board_id):
    return _ok(atividades=board_service.atividades(request.user, board_id))


# === Listas ===

@requer_login_api
@require_POST
def criar_lista_view(request, board_id):
    dados = corpo_json(request)
    lista = board_service.criar_lista(
        request.user, board_id, dados.get('titulo'), cor=dados.get('cor'), origem=_origem(request)
    )
    return _ok(status=201, lista=serializar_lista(lista, []))


@requer_login_api
@require_GET
def listas_arquivadas_view(request, board_id):
    return _ok(listas=board_service.listas_arquivadas(request.user, board_id))


@requer_login_api
@require_http_methods(["PATCH", "DELETE"])
def lista_detalhe_view(request, lista_id):
    if request.method == 'PATCH':
        lista = board_service.atualizar_lista(
            request.user, lista_id, corpo_json(request), origem=_origem(request)
        )
        return _ok(lista=serializar_lista(lista))

    board_service.excluir_lista(request.user, lista_id, origem=_origem(request))
    return _ok()


@requer_login_api
@require_POST
def arquivar_lista_view(request, lista_id):
    lista = board_service.arquivar_lista(request.user, lista_id, origem=_origem(request))
    return _ok(lista=serializar_lista(lista))


# === Tarefas ===

@requer_login_api
@require_POST
def criar_tarefa_view(request, lista_id):
    tarefa = board_service.criar_tarefa(
        request.user, lista_id, corpo_json(request), origem=_origem(request)
    )
    return _ok(status=201, tarefa=serializar_tarefa(tarefa))


@requer_login_api
@require_http_methods(["GET", "PATCH", "DELETE"])
def tarefa_detalhe_view(request, tarefa_id):
    if request.method == 'GET':
        return _ok(tarefa=board_service.obter_tarefa(request.user, tarefa_id))

    if request.method == 'PATCH':
        tarefa = board_service.atualizar_tarefa(
            request.user, tarefa_id, corpo_json(request), origem=_origem(request)
        )
        return _ok(tarefa=serializar_tarefa(tarefa))

    board_service.excluir_tarefa(request.user, tarefa_id, origem=_origem(request))
    return _ok()


@requer_login_api
@require_POST
def comentar_tarefa_view(request, tarefa_id):
    dados = corpo_json(request)
    comentario = board_service.comentar_tarefa(
        request.user, tarefa_id, exigir_campo(dados, 'texto'), origem=_origem(request)
    )
    return _ok(status=201, comentario=serializar_comentario(comentario))


@requer_login_api
@require_POST
def atribuir_responsavel_view(request, tarefa_id):
    dados = corpo_json(request)
    tarefa = board_service.atribuir_responsavel(
        request.user, tarefa_id, exigir_campo(dados, 'usuario_id'), origem=_origem(request)
    )
    return _ok(tarefa=serializar_tarefa(tarefa))


@requer_login_api
@require_http_methods(["DELETE"])
def remover_responsavel_view(request, tarefa_id, usuario_id):
    tarefa = board_service.remover_responsavel(
        request.user, tarefa_id, usuario_id, origem=_origem(request)
    )
    return _ok(tarefa=serializar_tarefa(tarefa))


# === Movimentos (drag-and-drop) ===

@requer_login_api
@require_POST
def mover_tarefa_view(request, tarefa_id):
    """
    Move a tarefa para `indice` na lista `destino_id`

    Body: {"origem_id": int, "destino_id": int, "indice": int}
    """
    dados = corpo_json(request)
    evento = movimento_service.mover_tarefa(
        request.user,
        tarefa_id,
        exigir_campo(dados, 'origem_id'),
        exigir_campo(dados, 'destino_id'),
        exigir_campo(dados, 'indice'),
        origem=_origem(request),
    )
    return _ok(evento=evento.para_mensagem())


@requer_login_api
@require_http_methods(["PUT"])
def reordenar_tarefas_view(request, lista_id):
    """Body: {"tarefa_ids": [int, ...]} - permutação exata da ordem atual"""
    dados = corpo_json(request)
    evento = movimento_service.reordenar_tarefas(
        request.user, lista_id, exigir_campo(dados, 'tarefa_ids'), origem=_origem(request)
    )
    return _ok(evento=evento.para_mensagem())


@requer_login_api
@require_POST
def mover_lista_view(request, board_id, lista_id):
    """Body: {"indice": int}"""
    dados = corpo_json(request)
    evento = movimento_service.mover_lista(
        request.user, lista_id, board_id, exigir_campo(dados, 'indice'), origem=_origem(request)
    )
    return _ok(evento=evento.para_mensagem())


@requer_login_api
@require_http_methods(["PUT"])
def reordenar_listas_view(request, board_id):
    """Body: {"lista_ids": [int, ...]} - permutação exata das listas ativas"""
    dados = corpo_json(request)
    evento = movimento_service.reordenar_listas(
        request.user, board_id, exigir_campo(dados, 'lista_ids'), origem=_origem(request)
    )
    return _ok(evento=evento.para_mensagem())


# === Membros ===

@requer_login_api
@require_POST
def adicionar_membro_view(request, board_id):
    dados = corpo_json(request)
    membro = board_service.adicionar_membro(
        request.user, board_id, exigir_campo(dados, 'email'), dados.get('papel', 'membro')
    )
    return _ok(status=201, membro={'usuario_id': membro.usuario_id, 'papel': membro.papel})


@requer_login_api
@require_http_methods(["PATCH", "DELETE"])
def membro_detalhe_view(request, board_id, usuario_id):
    if request.method == 'PATCH':
        dados = corpo_json(request)
        membro = board_service.alterar_papel(
            request.user, board_id, usuario_id, exigir_campo(dados, 'papel')
        )
        return _ok(membro={'usuario_id': membro.usuario_id, 'papel': membro.papel})

    board_service.remover_membro(request.user, board_id, usuario_id)
    return _ok()
