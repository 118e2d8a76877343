# apps/board/broadcast.py

"""
Registro de grupos de difusão

Cada board tem um grupo `board_<id>` no channel layer com as sessões
WebSocket que estão olhando para ele. O difusor é criado pela camada de
rede e injetado nos serviços e views; ninguém acessa o channel layer
diretamente.

A emissão é fire-and-forget: não há confirmação dos ouvintes nem replay
para quem estava desconectado (o cliente pede `sync_board` ao voltar).
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.cache import cache
from django.db import transaction

logger = logging.getLogger(__name__)

# Tipo de mensagem no channel layer -> BoardConsumer.board_evento
TIPO_MENSAGEM_BOARD = 'board.evento'
TIPO_MENSAGEM_USUARIO = 'usuario.notificacao'

# Trava do dicionário de presença (segundos)
TIMEOUT_TRAVA = 5
ESPERA_TRAVA = 0.01
TENTATIVAS_TRAVA = 200


class DifusorBoard:
    """
    Emite eventos tipados para os grupos de board e de usuário, e mantém
    a lista de presença de cada board
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    @staticmethod
    def grupo_board(board_id):
        return f'board_{board_id}'

    @staticmethod
    def grupo_usuario(usuario_id):
        return f'usuario_{usuario_id}'

    @staticmethod
    def _chave_presenca(board_id):
        return f'sincro:presenca:{board_id}'

    @asynccontextmanager
    async def _trava_presenca(self, board_id, canal):
        """
        Exclusão mútua para o read-modify-write do dicionário de presença

        `cache.add` só grava se a chave não existe (SET NX no Redis), então
        serve de trava entre sessões e entre processos. O timeout libera a
        trava de um processo que morreu segurando-a.
        """
        trava = f'{self._chave_presenca(board_id)}:trava'
        for _ in range(TENTATIVAS_TRAVA):
            if await cache.aadd(trava, canal, TIMEOUT_TRAVA):
                break
            await asyncio.sleep(ESPERA_TRAVA)
        else:
            logger.warning(f"⚠️ Trava de presença do board {board_id} não obtida; seguindo sem ela")
        try:
            yield
        finally:
            if await cache.aget(trava) == canal:
                await cache.adelete(trava)

    # === Entrada e saída de sessões ===

    async def entrar(self, board_id, canal, usuario):
        """Inscreve a sessão no grupo do board e registra presença"""
        await self.channel_layer.group_add(self.grupo_board(board_id), canal)

        chave = self._chave_presenca(board_id)
        async with self._trava_presenca(board_id, canal):
            presentes = await cache.aget(chave, {})
            presentes[canal] = {'usuario_id': usuario.id, 'nome': usuario.nome_exibicao}
            await cache.aset(chave, presentes, None)

    async def sair(self, board_id, canal):
        await self.channel_layer.group_discard(self.grupo_board(board_id), canal)

        chave = self._chave_presenca(board_id)
        async with self._trava_presenca(board_id, canal):
            presentes = await cache.aget(chave, {})
            presentes.pop(canal, None)
            if presentes:
                await cache.aset(chave, presentes, None)
            else:
                await cache.adelete(chave)

    async def presentes(self, board_id):
        """Usuários online no board (uma entrada por usuário)"""
        presentes = await cache.aget(self._chave_presenca(board_id), {})
        por_usuario = {}
        for info in presentes.values():
            por_usuario[info['usuario_id']] = info
        return list(por_usuario.values())

    async def entrar_usuario(self, usuario_id, canal):
        await self.channel_layer.group_add(self.grupo_usuario(usuario_id), canal)

    async def sair_usuario(self, usuario_id, canal):
        await self.channel_layer.group_discard(self.grupo_usuario(usuario_id), canal)

    # === Emissão ===

    async def emitir_async(self, evento, origem=None):
        """
        Envia o evento ao grupo do board

        Args:
            evento: instância de EventoBoard
            origem: channel name da sessão que originou a mudança
                    (não recebe o próprio eco)
        """
        await self.channel_layer.group_send(
            self.grupo_board(evento.board_id),
            {
                'type': TIPO_MENSAGEM_BOARD,
                'evento': evento.para_mensagem(),
                'origem': origem,
            }
        )

    def emitir(self, evento, origem=None):
        """Versão síncrona para views/serviços; falhas só são logadas"""
        try:
            async_to_sync(self.emitir_async)(evento, origem)
        except Exception:
            logger.exception(f"❌ Falha ao difundir {evento.tipo} no board {evento.board_id}")

    def emitir_apos_commit(self, evento, origem=None):
        """Agenda a emissão para depois do commit da transação atual"""
        transaction.on_commit(lambda: self.emitir(evento, origem))

    def notificar_usuario(self, usuario_id, evento):
        """Envia o evento ao canal pessoal de um usuário (convites)"""
        try:
            async_to_sync(self.channel_layer.group_send)(
                self.grupo_usuario(usuario_id),
                {
                    'type': TIPO_MENSAGEM_USUARIO,
                    'evento': evento.para_mensagem(),
                }
            )
        except Exception:
            logger.exception(f"❌ Falha ao notificar usuário {usuario_id} ({evento.tipo})")

    def notificar_usuario_apos_commit(self, usuario_id, evento):
        transaction.on_commit(lambda: self.notificar_usuario(usuario_id, evento))
