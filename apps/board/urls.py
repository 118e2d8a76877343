# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('boards/', views.boards_view, name='boards'),
    path('boards/<int:board_id>/', views.board_detalhe_view, name='board_detalhe'),
    path('boards/<int:board_id>/arquivar/', views.arquivar_board_view, name='arquivar_board'),
    path('boards/<int:board_id>/atividades/', views.atividades_view, name='atividades'),

    # Listas
    path('boards/<int:board_id>/listas/', views.criar_lista_view, name='criar_lista'),
    path('boards/<int:board_id>/listas/arquivadas/', views.listas_arquivadas_view, name='listas_arquivadas'),
    path('boards/<int:board_id>/listas/reordenar/', views.reordenar_listas_view, name='reordenar_listas'),
    path('boards/<int:board_id>/listas/<int:lista_id>/mover/', views.mover_lista_view, name='mover_lista'),
    path('listas/<int:lista_id>/', views.lista_detalhe_view, name='lista_detalhe'),
    path('listas/<int:lista_id>/arquivar/', views.arquivar_lista_view, name='arquivar_lista'),

    # Tarefas
    path('listas/<int:lista_id>/tarefas/', views.criar_tarefa_view, name='criar_tarefa'),
    path('listas/<int:lista_id>/tarefas/reordenar/', views.reordenar_tarefas_view, name='reordenar_tarefas'),
    path('tarefas/<int:tarefa_id>/', views.tarefa_detalhe_view, name='tarefa_detalhe'),
    path('tarefas/<int:tarefa_id>/mover/', views.mover_tarefa_view, name='mover_tarefa'),
    path('tarefas/<int:tarefa_id>/comentarios/', views.comentar_tarefa_view, name='comentar_tarefa'),
    path('tarefas/<int:tarefa_id>/responsaveis/', views.atribuir_responsavel_view, name='atribuir_responsavel'),
    path(
        'tarefas/<int:tarefa_id>/responsaveis/<int:usuario_id>/',
        views.remover_responsavel_view,
        name='remover_responsavel'
    ),

    # Membros
    path('boards/<int:board_id>/membros/', views.adicionar_membro_view, name='adicionar_membro'),
    path('boards/<int:board_id>/membros/<int:usuario_id>/', views.membro_detalhe_view, name='membro_detalhe'),
]
