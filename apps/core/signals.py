# apps/core/signals.py

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Board, MembroBoard

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Board)
def remover_dono_dos_membros(sender, instance, **kwargs):
    """
    O dono nunca aparece em MembroBoard (inclusive após troca de dono)
    """
    removidos, _ = MembroBoard.objects.filter(board=instance, usuario_id=instance.dono_id).delete()
    if removidos:
        logger.info(f"👥 Participação redundante do dono removida no board {instance.id}")


@receiver(post_save, sender=MembroBoard)
def impedir_dono_como_membro(sender, instance, created, **kwargs):
    """
    Participação criada para o dono (ex.: pelo admin) é descartada
    """
    if created and instance.usuario_id == instance.board.dono_id:
        instance.delete()
