# apps/core/middleware.py

import logging
from django.http import JsonResponse

from .exceptions import ErroBoard, FalhaPersistencia

logger = logging.getLogger(__name__)


class ErroBoardMiddleware:
    """
    Converte erros de domínio (ErroBoard) levantados pelas views em
    respostas JSON com o status HTTP correspondente

    Erros de validação/acesso viram warning; falhas de persistência já
    foram logadas com traceback pelo serviço.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not isinstance(exception, ErroBoard):
            return None  # Deixar o Django lidar com o resto

        usuario = getattr(request, 'user', None)
        if not isinstance(exception, FalhaPersistencia):
            logger.warning(
                f"⚠️ {exception.codigo} em {request.method} {request.path} "
                f"({getattr(usuario, 'username', 'anônimo')}): {exception.mensagem}"
            )

        return JsonResponse(exception.para_dict(), status=exception.status_http)
