# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import Atividade, Board, Comentario, Lista, MembroBoard, Tarefa, Usuario


def _cor_preview(cor):
    return format_html(
        '<div style="width: 20px; height: 20px; background-color: {}; '
        'border: 1px solid #ccc; border-radius: 3px;"></div>',
        cor
    )


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Admin customizado para o modelo Usuario"""

    list_display = ['username', 'email', 'get_full_name', 'boards_count', 'is_active', 'date_joined']
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Perfil', {
            'fields': ('avatar',)
        }),
    )

    def boards_count(self, obj):
        return obj.boards_proprios.count()

    boards_count.short_description = 'Boards próprios'


class MembroInline(admin.TabularInline):
    model = MembroBoard
    extra = 0
    fields = ['usuario', 'papel', 'entrou_em']
    autocomplete_fields = ['usuario']


class ListaInline(admin.TabularInline):
    """Ordem é somente leitura: alterar posições à mão quebra a sincronia"""
    model = Lista
    extra = 0
    fields = ['titulo', 'posicao', 'arquivada']
    readonly_fields = ['posicao']
    ordering = ['posicao', 'criado_em', 'id']
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Admin para boards Kanban"""

    list_display = ['titulo', 'dono', 'listas_count', 'membros_count', 'privado', 'arquivado', 'criado_em']
    list_filter = ['privado', 'arquivado', 'criado_em']
    search_fields = ['titulo', 'descricao', 'dono__username']
    readonly_fields = ['ordem_listas', 'criado_em', 'atualizado_em']
    autocomplete_fields = ['dono']
    inlines = [MembroInline, ListaInline]

    def listas_count(self, obj):
        return obj.listas.filter(arquivada=False).count()

    listas_count.short_description = 'Listas'

    def membros_count(self, obj):
        return obj.membros.count()

    membros_count.short_description = 'Membros'


class TarefaInline(admin.TabularInline):
    model = Tarefa
    extra = 0
    fields = ['titulo', 'prioridade', 'status', 'posicao', 'arquivada']
    readonly_fields = ['posicao']
    ordering = ['posicao', 'criado_em', 'id']
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        """Tarefas novas precisam entrar em ordem_tarefas (use a API)"""
        return False


@admin.register(Lista)
class ListaAdmin(admin.ModelAdmin):
    """Admin para listas do Kanban"""

    list_display = ['titulo', 'board', 'posicao', 'tarefas_count', 'arquivada', 'cor_preview']
    list_filter = ['arquivada', 'board']
    search_fields = ['titulo', 'board__titulo']
    ordering = ['board', 'posicao']
    readonly_fields = ['board', 'posicao', 'ordem_tarefas', 'criado_em', 'atualizado_em']
    inlines = [TarefaInline]

    def has_add_permission(self, request):
        return False

    def tarefas_count(self, obj):
        return obj.tarefas.filter(arquivada=False).count()

    tarefas_count.short_description = 'Tarefas'

    def cor_preview(self, obj):
        return _cor_preview(obj.cor)

    cor_preview.short_description = 'Cor'


class ComentarioInline(admin.TabularInline):
    model = Comentario
    extra = 0
    fields = ['autor', 'texto', 'criado_em']
    readonly_fields = ['autor', 'criado_em']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Tarefa)
class TarefaAdmin(admin.ModelAdmin):
    """Admin para tarefas"""

    list_display = ['titulo', 'lista', 'board', 'prioridade_badge', 'status', 'prazo', 'concluida']
    list_filter = ['prioridade', 'status', 'concluida', 'arquivada', 'board']
    search_fields = ['titulo', 'descricao', 'lista__titulo']
    readonly_fields = ['lista', 'board', 'posicao', 'criado_por', 'concluida_em', 'criado_em', 'atualizado_em']
    filter_horizontal = ['responsaveis']
    inlines = [ComentarioInline]

    def has_add_permission(self, request):
        return False

    def prioridade_badge(self, obj):
        """Exibe a prioridade com badge colorido"""
        cores = {
            'baixa': '#10B981',
            'media': '#F59E0B',
            'alta': '#F97316',
            'urgente': '#EF4444',
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            cores.get(obj.prioridade, '#6B7280'), obj.get_prioridade_display()
        )

    prioridade_badge.short_description = 'Prioridade'


@admin.register(Atividade)
class AtividadeAdmin(admin.ModelAdmin):
    """Histórico - apenas leitura"""

    list_display = ['board', 'usuario', 'acao', 'detalhes_resumo', 'criado_em']
    list_filter = ['acao', 'board']
    search_fields = ['acao', 'detalhes', 'usuario__username']
    readonly_fields = ['board', 'usuario', 'acao', 'detalhes', 'criado_em']

    def has_add_permission(self, request):
        return False

    def detalhes_resumo(self, obj):
        if len(obj.detalhes) > 50:
            return f"{obj.detalhes[:50]}..."
        return obj.detalhes

    detalhes_resumo.short_description = 'Detalhes'

