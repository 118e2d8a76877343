# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

from apps.core.exceptions import ErroBoard
from apps.core.models import Board
from apps.core.permissions import SincroPermissions
from apps.core.utils import estado_board, gerar_cor_usuario

from .broadcast import DifusorBoard
from .events import CursorMovido, UsuarioEntrou, UsuarioSaiu

logger = logging.getLogger(__name__)

# Códigos de fechamento (faixa 4000-4999 é livre para a aplicação)
FECHAMENTO_NAO_AUTENTICADO = 4001
FECHAMENTO_SEM_ACESSO = 4003


def _timestamp():
    return timezone.now().isoformat()


def _coordenada(valor):
    """Percentual da área do board, limitado a [0, 100]"""
    if isinstance(valor, bool):
        raise ValueError(valor)
    return max(0.0, min(100.0, float(valor)))


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket para atualizações em tempo real do board

    Funcionalidades:
    - Recebe os eventos difundidos pelo grupo `board_<id>` (exceto o eco
      da própria sessão)
    - Presença: usuario_entrou / usuario_saiu
    - Cursores ao vivo
    - Sincronização completa após reconexão (`sync_board`)
    """

    def __init__(self, *args, difusor=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.difusor = difusor
        self.board_id = None
        self.inscrito = False

    async def connect(self):
        """
        Conecta usuário ao grupo do board
        Verifica permissões antes de aceitar conexão
        """
        self.board_id = int(self.scope['url_route']['kwargs']['board_id'])
        self.user = self.scope['user']

        if self.difusor is None:
            self.difusor = DifusorBoard(self.channel_layer)

        if not self.user.is_authenticated:
            logger.warning("❌ Conexão WebSocket rejeitada - usuário não autenticado")
            await self.close(code=FECHAMENTO_NAO_AUTENTICADO)
            return

        self.papel = await self.verificar_acesso()
        if self.papel is None:
            logger.warning(f"❌ Conexão WebSocket rejeitada - {self.user.username} sem acesso ao board {self.board_id}")
            await self.close(code=FECHAMENTO_SEM_ACESSO)
            return

        await self.accept()
        await self.difusor.entrar(self.board_id, self.channel_name, self.user)
        self.inscrito = True

        await self.enviar({
            'tipo': 'conexao',
            'socket_id': self.channel_name,
            'heartbeat': settings.SINCRO_WS_HEARTBEAT_INTERVAL,
            'papel': self.papel,
            'presentes': await self.difusor.presentes(self.board_id),
            'timestamp': _timestamp(),
        })

        await self.difusor.emitir_async(
            UsuarioEntrou(board_id=self.board_id, usuario_id=self.user.id, nome=self.user.nome_exibicao),
            origem=self.channel_name,
        )

        logger.info(f"✅ WebSocket conectado - {self.user.username} no board {self.board_id}")

    async def disconnect(self, close_code):
        """
        Desconecta usuário do grupo
        """
        if not self.inscrito:
            return

        self.inscrito = False
        await self.difusor.sair(self.board_id, self.channel_name)
        await self.difusor.emitir_async(
            UsuarioSaiu(board_id=self.board_id, usuario_id=self.user.id, nome=self.user.nome_exibicao),
            origem=self.channel_name,
        )

        logger.info(f"🔌 WebSocket desconectado - {self.user.username} do board {self.board_id}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Recebe mensagens do cliente WebSocket
        Processa ping, cursor e sync_board
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.warning(f"❌ JSON inválido recebido via WebSocket de {self.user.username}")
            await self.enviar_erro('Mensagem inválida')
            return

        tipo = data.get('tipo') if isinstance(data, dict) else None

        # Heartbeat
        if tipo == 'ping':
            await self.enviar({'tipo': 'pong', 'timestamp': _timestamp()})

        elif tipo == 'cursor':
            try:
                x = _coordenada(data.get('x'))
                y = _coordenada(data.get('y'))
            except (TypeError, ValueError):
                await self.enviar_erro('Posição de cursor inválida')
                return

            await self.difusor.emitir_async(
                CursorMovido(
                    board_id=self.board_id,
                    usuario_id=self.user.id,
                    nome=self.user.nome_exibicao,
                    x=x,
                    y=y,
                    cor=gerar_cor_usuario(self.user.username),
                ),
                origem=self.channel_name,
            )

        # Sincronização de estado do board
        elif tipo == 'sync_board':
            try:
                estado = await self.obter_estado()
            except ErroBoard as e:
                await self.enviar_erro(e.mensagem, e.codigo)
                return
            await self.enviar({'tipo': 'board_sync', 'board': estado, 'timestamp': _timestamp()})

        else:
            await self.enviar_erro(f'Tipo de mensagem desconhecido: {tipo!r}')

    # === Handlers do channel layer ===

    async def board_evento(self, mensagem):
        """Repassa o evento do grupo, exceto para a sessão que o originou"""
        if mensagem.get('origem') == self.channel_name:
            return

        evento = mensagem['evento']
        await self.enviar(evento)

        # Membro removido perde o acesso imediatamente
        if evento.get('tipo') == 'membro_removido' and evento.get('membro_id') == self.user.id:
            await self.close(code=FECHAMENTO_SEM_ACESSO)

    # === Métodos auxiliares ===

    async def enviar(self, dados):
        await self.send(text_data=json.dumps(dados))

    async def enviar_erro(self, mensagem, codigo='mensagem_invalida'):
        await self.enviar({'tipo': 'erro', 'error': mensagem, 'codigo': codigo})

    @database_sync_to_async
    def verificar_acesso(self):
        """Papel do usuário no board, ou None sem acesso"""
        try:
            board = Board.objects.get(id=self.board_id)
            return SincroPermissions.exigir_leitura(board, self.user)
        except (Board.DoesNotExist, ErroBoard):
            return None

    @database_sync_to_async
    def obter_estado(self):
        board = Board.objects.get(id=self.board_id)
        papel = SincroPermissions.exigir_leitura(board, self.user)
        return estado_board(board, papel)


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    Consumer para notificações pessoais do usuário (convites)
    """

    def __init__(self, *args, difusor=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.difusor = difusor
        self.inscrito = False

    async def connect(self):
        """
        Conecta usuário ao seu grupo pessoal de notificações
        """
        self.user = self.scope['user']

        if not self.user.is_authenticated:
            await self.close(code=FECHAMENTO_NAO_AUTENTICADO)
            return

        if self.difusor is None:
            self.difusor = DifusorBoard(self.channel_layer)

        await self.accept()
        await self.difusor.entrar_usuario(self.user.id, self.channel_name)
        self.inscrito = True
        logger.info(f"🔔 Notificações conectadas para {self.user.username}")

    async def disconnect(self, close_code):
        if not self.inscrito:
            return

        self.inscrito = False
        await self.difusor.sair_usuario(self.user.id, self.channel_name)
        logger.info(f"🔕 Notificações desconectadas para {self.user.username}")

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.warning(f"❌ JSON inválido nas notificações de {self.user.username}")
            return

        if isinstance(data, dict) and data.get('tipo') == 'ping':
            await self.send(text_data=json.dumps({'tipo': 'pong', 'timestamp': _timestamp()}))

    async def usuario_notificacao(self, mensagem):
        """
        Envia notificação para o usuário
        """
        await self.send(text_data=json.dumps(mensagem['evento']))
