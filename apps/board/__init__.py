# apps/board/__init__.py

"""
Board - Aplicação Kanban do Sincro Board

Funcionalidades:
- Reordenação e movimentação de listas e tarefas
- Eventos em tempo real via WebSockets
- API JSON de boards, listas, tarefas e membros
"""
