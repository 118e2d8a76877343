# apps/convites/admin.py

from django.contrib import admin

from .models import Convite


@admin.register(Convite)
class ConviteAdmin(admin.ModelAdmin):
    """Admin para convites"""

    list_display = ['board', 'convidante', 'convidado', 'papel', 'status', 'expira_em', 'criado_em']
    list_filter = ['status', 'papel']
    search_fields = ['board__titulo', 'convidante__username', 'convidado__username']
    readonly_fields = ['respondido_em', 'criado_em', 'atualizado_em']
