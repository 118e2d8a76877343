# apps/convites/models.py

from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import Board, MembroBoard


def _expiracao_padrao():
    return timezone.now() + timedelta(days=settings.SINCRO_CONVITE_VALIDADE_DIAS)


class Convite(models.Model):
    """
    Convite para participar de um board com um papel

    Só pode existir um convite pendente por (board, convidado).
    """

    STATUS_CHOICES = [
        ('pendente', 'Pendente'),
        ('aceito', 'Aceito'),
        ('recusado', 'Recusado'),
        ('cancelado', 'Cancelado'),
    ]

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='convites'
    )
    convidante = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='convites_enviados'
    )
    convidado = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='convites_recebidos'
    )
    papel = models.CharField(max_length=10, choices=MembroBoard.PAPEL_CHOICES, default='membro')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pendente')
    mensagem = models.TextField(max_length=500, blank=True)
    expira_em = models.DateTimeField(default=_expiracao_padrao)
    respondido_em = models.DateTimeField(null=True, blank=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'convite'
        ordering = ['-criado_em', '-id']
        indexes = [
            models.Index(fields=['convidado', 'status'], name='convite_convida_3b7e2a_idx'),
            models.Index(fields=['expira_em'], name='convite_expira__6d4c1f_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['board', 'convidado'],
                condition=models.Q(status='pendente'),
                name='convite_pendente_unico',
            ),
        ]

    def __str__(self):
        return f"{self.convidante} → {self.convidado} ({self.board}) [{self.status}]"

    @property
    def expirado(self):
        return self.expira_em < timezone.now()

    @property
    def pendente(self):
        return self.status == 'pendente'

    def aceitar(self):
        self.status = 'aceito'
        self.respondido_em = timezone.now()

    def recusar(self):
        self.status = 'recusado'
        self.respondido_em = timezone.now()

    def cancelar(self):
        self.status = 'cancelado'
