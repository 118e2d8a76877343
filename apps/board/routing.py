# apps/board/routing.py

from django.urls import re_path
from . import consumers

# Rotas WebSocket para a aplicação board
websocket_urlpatterns = [
    # Board específico - ordem, CRUD, presença e cursores em tempo real
    re_path(r'ws/board/(?P<board_id>\d+)/$', consumers.BoardConsumer.as_asgi()),

    # Canal pessoal do usuário - convites
    re_path(r'ws/notificacoes/$', consumers.NotificationConsumer.as_asgi()),
]
