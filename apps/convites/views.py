# apps/convites/views.py

from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.permissions import requer_login_api
from apps.core.utils import corpo_json, exigir_campo

from .convite_service import convite_service, serializar_convite


@requer_login_api
@require_POST
def enviar_convite_view(request):
    """
    Body: {"board_id": int, "username": str, "papel": str, "mensagem": str}
    """
    dados = corpo_json(request)
    convite = convite_service.enviar(
        request.user,
        exigir_campo(dados, 'board_id'),
        exigir_campo(dados, 'username'),
        papel=dados.get('papel', 'membro'),
        mensagem=dados.get('mensagem', ''),
    )
    return JsonResponse({'success': True, 'convite': serializar_convite(convite)}, status=201)


@requer_login_api
@require_GET
def convites_recebidos_view(request):
    return JsonResponse({'success': True, 'convites': convite_service.recebidos(request.user)})


@requer_login_api
@require_GET
def convites_enviados_view(request):
    return JsonResponse({'success': True, 'convites': convite_service.enviados(request.user)})


@requer_login_api
@require_POST
def aceitar_convite_view(request, convite_id):
    convite = convite_service.aceitar(request.user, convite_id)
    return JsonResponse({'success': True, 'convite': serializar_convite(convite)})


@requer_login_api
@require_POST
def recusar_convite_view(request, convite_id):
    convite = convite_service.recusar(request.user, convite_id)
    return JsonResponse({'success': True, 'convite': serializar_convite(convite)})


@requer_login_api
@require_http_methods(["DELETE"])
def cancelar_convite_view(request, convite_id):
    convite_service.cancelar(request.user, convite_id)
    return JsonResponse({'success': True})
