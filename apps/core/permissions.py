# apps/core/permissions.py

from functools import wraps
from django.http import JsonResponse

from .exceptions import AcessoNegado


# Hierarquia de papéis dentro de um board
HIERARQUIA_PAPEIS = {
    'leitor': 1,
    'membro': 2,
    'admin': 3,
    'dono': 4,
}


class SincroPermissions:
    """
    Sistema de permissões do Sincro Board
    Baseado no papel do usuário em cada board: dono, admin, membro, leitor
    """

    @staticmethod
    def exigir_papel(board, usuario, papel_minimo='membro'):
        """
        Levanta AcessoNegado se o usuário não tiver o papel mínimo
        ou se o board estiver arquivado

        Returns:
            papel do usuário no board
        """
        papel = board.papel_do_usuario(usuario)

        if papel is None:
            raise AcessoNegado('Acesso negado - você não é membro deste board')

        if board.arquivado:
            raise AcessoNegado('Board arquivado')

        if HIERARQUIA_PAPEIS[papel] < HIERARQUIA_PAPEIS[papel_minimo]:
            raise AcessoNegado(f'Acesso negado - papel {papel_minimo} necessário')

        return papel

    @staticmethod
    def exigir_leitura(board, usuario):
        """
        Leitura do board: membros sempre (mesmo arquivado); demais
        usuários autenticados só em boards públicos não arquivados

        Returns:
            papel do usuário, ou 'leitor' para visitantes de board público
        """
        papel = board.papel_do_usuario(usuario)
        if papel is not None:
            return papel

        if usuario.is_authenticated and not board.privado and not board.arquivado:
            return 'leitor'

        raise AcessoNegado('Acesso negado - você não é membro deste board')


# Decoradores para views

def requer_login_api(view_func):
    """
    Decorador para endpoints JSON: responde 401 em vez de redirecionar
    para a tela de login
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse(
                {'success': False, 'error': 'Autenticação necessária', 'codigo': 'nao_autenticado'},
                status=401
            )
        return view_func(request, *args, **kwargs)

    return wrapped_view
