# apps/__init__.py

"""
Sincro Board - Aplicações Django

Este pacote contém todas as aplicações do sistema:
- core: Models principais, permissões e erros de domínio
- board: Ordem de listas/tarefas, API JSON e WebSockets
- convites: Convites para participar de boards
"""

__version__ = '0.1.0'
