# apps/core/__init__.py

"""
Core - Aplicação principal do Sincro Board

Contém:
- Models (Usuario, Board, MembroBoard, Lista, Tarefa, Atividade)
- Sistema de permissões por papel
- Erros de domínio e middleware de conversão para JSON
- Comandos de seed e verificação de ordem
"""
