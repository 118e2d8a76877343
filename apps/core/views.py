# apps/core/views.py

import logging

from django.core.cache import cache
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps import __version__

from .models import Usuario
from .permissions import requer_login_api
from .utils import gerar_cor_usuario, serializar_usuario

logger = logging.getLogger(__name__)


@require_GET
def health_check(request):
    """
    Health check para monitoramento
    """
    try:
        # Verificar conexão com banco
        Usuario.objects.exists()

        # Verificar cache (Redis em produção)
        cache.set('health_check', 'ok', 60)
        cache_ok = cache.get('health_check') == 'ok'

    except DatabaseError as e:
        logger.error(f"❌ Health check falhou: {e}")
        return JsonResponse({
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
            'version': __version__,
        }, status=500)

    return JsonResponse({
        'status': 'healthy' if cache_ok else 'degraded',
        'database': 'ok',
        'cache': 'ok' if cache_ok else 'falhou',
        'timestamp': timezone.now().isoformat(),
        'version': __version__,
    })


@requer_login_api
@require_GET
def usuario_atual(request):
    """Perfil do usuário logado (usado pelo cliente para cursor e presença)"""
    dados = serializar_usuario(request.user)
    dados['cor'] = gerar_cor_usuario(request.user.username)
    dados['email'] = request.user.email
    return JsonResponse({'success': True, 'usuario': dados})
