# apps/convites/convite_service.py

"""
Serviço de convites

Notificações vão pelo canal pessoal do usuário (`usuario_<id>`); a
entrada do novo membro é difundida para o grupo do board.
"""

import logging
from typing import Dict, List, Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.board.broadcast import DifusorBoard
from apps.board.events import ConviteRecebido, ConviteRespondido, MembroAdicionado
from apps.board.persistence import carregar, escrita_atomica
from apps.core.exceptions import AcessoNegado, NaoEncontrado, OperacaoInvalida
from apps.core.models import Board, MembroBoard
from apps.core.permissions import SincroPermissions
from apps.core.utils import serializar_usuario

from .models import Convite

logger = logging.getLogger(__name__)
Usuario = get_user_model()

PAPEIS_CONVITE = {valor for valor, _ in MembroBoard.PAPEL_CHOICES}


def serializar_convite(convite) -> Dict:
    return {
        'id': convite.id,
        'board': {
            'id': convite.board_id,
            'titulo': convite.board.titulo,
            'descricao': convite.board.descricao,
            'cor_fundo': convite.board.cor_fundo,
        },
        'convidante': serializar_usuario(convite.convidante),
        'convidado': serializar_usuario(convite.convidado),
        'papel': convite.papel,
        'status': convite.status,
        'mensagem': convite.mensagem,
        'expira_em': convite.expira_em.isoformat(),
        'respondido_em': convite.respondido_em.isoformat() if convite.respondido_em else None,
        'expirado': convite.expirado,
    }


class ConviteService:
    """Envio e resposta de convites para boards"""

    def __init__(self, difusor: Optional[DifusorBoard] = None):
        self.difusor = difusor or DifusorBoard()

    def enviar(self, usuario, board_id, username, papel='membro', mensagem=''):
        """
        Convida um usuário (pelo username) para o board

        Apenas admin ou dono. Não é possível convidar a si mesmo, quem já
        participa, ou quem já tem convite pendente.
        """
        if papel not in PAPEIS_CONVITE:
            raise OperacaoInvalida('Papel inválido')
        mensagem = (mensagem or '').strip()
        if len(mensagem) > 500:
            raise OperacaoInvalida('A mensagem deve ter no máximo 500 caracteres')

        with escrita_atomica('enviar convite'):
            board = carregar(Board, board_id, 'Board não encontrado')
            SincroPermissions.exigir_papel(board, usuario, 'admin')

            convidado = Usuario.objects.filter(username=(username or '').strip()).first()
            if convidado is None:
                raise NaoEncontrado('Usuário não encontrado')
            if convidado.id == usuario.id:
                raise OperacaoInvalida('Você não pode convidar a si mesmo')
            if board.eh_membro(convidado):
                raise OperacaoInvalida('Usuário já é membro do board')
            pendentes = Convite.objects.filter(board=board, convidado=convidado, status='pendente')
            # Convite vencido não impede um novo
            pendentes.filter(expira_em__lte=timezone.now()).update(status='cancelado')
            if pendentes.exists():
                raise OperacaoInvalida('Já existe um convite pendente para este usuário')

            convite = Convite.objects.create(
                board=board,
                convidante=usuario,
                convidado=convidado,
                papel=papel,
                mensagem=mensagem,
            )

            self.difusor.notificar_usuario_apos_commit(convidado.id, ConviteRecebido(
                board_id=board.id,
                usuario_id=usuario.id,
                convite_id=convite.id,
                mensagem=f'{usuario.username} convidou você para "{board.titulo}"',
            ))

        logger.info(f"✉️ Convite {convite.id}: {usuario.username} → {convidado.username} (board {board.id})")
        return convite

    def recebidos(self, usuario) -> List[Dict]:
        """Convites pendentes e ainda válidos do usuário"""
        convites = Convite.objects.filter(
            convidado=usuario,
            status='pendente',
            expira_em__gt=timezone.now(),
        ).select_related('board', 'convidante', 'convidado')
        return [serializar_convite(c) for c in convites]

    def enviados(self, usuario) -> List[Dict]:
        convites = Convite.objects.filter(convidante=usuario).select_related('board', 'convidante', 'convidado')
        return [serializar_convite(c) for c in convites]

    def aceitar(self, usuario, convite_id):
        with escrita_atomica('aceitar convite'):
            convite = self._convite_do_convidado(usuario, convite_id, 'aceitar')
            if convite.expirado:
                raise OperacaoInvalida('O convite expirou')

            board = convite.board
            convite.aceitar()
            convite.save(update_fields=['status', 'respondido_em', 'atualizado_em'])

            board.adicionar_membro(usuario, convite.papel)
            board.registrar_atividade(usuario, 'entrou no board', f'{usuario.username} entrou no board')

            self.difusor.emitir_apos_commit(MembroAdicionado(
                board_id=board.id,
                usuario_id=usuario.id,
                membro_id=usuario.id,
                papel=convite.papel,
            ))
            self.difusor.notificar_usuario_apos_commit(convite.convidante_id, ConviteRespondido(
                board_id=board.id,
                usuario_id=usuario.id,
                convite_id=convite.id,
                status=convite.status,
                mensagem=f'{usuario.username} aceitou seu convite para "{board.titulo}"',
            ))

        logger.info(f"✅ Convite {convite.id} aceito por {usuario.username}")
        return convite

    def recusar(self, usuario, convite_id):
        with escrita_atomica('recusar convite'):
            convite = self._convite_do_convidado(usuario, convite_id, 'recusar')
            convite.recusar()
            convite.save(update_fields=['status', 'respondido_em', 'atualizado_em'])

            self.difusor.notificar_usuario_apos_commit(convite.convidante_id, ConviteRespondido(
                board_id=convite.board_id,
                usuario_id=usuario.id,
                convite_id=convite.id,
                status=convite.status,
                mensagem=f'{usuario.username} recusou seu convite para "{convite.board.titulo}"',
            ))

        logger.info(f"🚫 Convite {convite.id} recusado por {usuario.username}")
        return convite

    def cancelar(self, usuario, convite_id):
        """Apenas quem convidou, e só enquanto pendente"""
        with escrita_atomica('cancelar convite'):
            convite = carregar(Convite, convite_id, 'Convite não encontrado')
            if convite.convidante_id != usuario.id:
                raise AcessoNegado('Apenas quem convidou pode cancelar o convite')
            if not convite.pendente:
                raise OperacaoInvalida('Apenas convites pendentes podem ser cancelados')

            convite.cancelar()
            convite.save(update_fields=['status', 'atualizado_em'])

        logger.info(f"🗑️ Convite {convite.id} cancelado por {usuario.username}")
        return convite

    @staticmethod
    def _convite_do_convidado(usuario, convite_id, acao):
        convite = carregar(Convite, convite_id, 'Convite não encontrado')
        if convite.convidado_id != usuario.id:
            raise AcessoNegado(f'Você não pode {acao} este convite')
        if not convite.pendente:
            raise OperacaoInvalida('O convite não está mais pendente')
        return convite


# Instância global do serviço
convite_service = ConviteService()
