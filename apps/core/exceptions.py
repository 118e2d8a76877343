# apps/core/exceptions.py

"""
Erros de domínio do Sincro Board

Cada classe corresponde a um tipo de falha que o cliente precisa
distinguir. As views (via ErroBoardMiddleware) convertem para JSON
com o status HTTP correspondente.
"""


class ErroBoard(Exception):
    """Base de todos os erros de operação sobre boards"""

    codigo = 'erro'
    status_http = 400
    mensagem_padrao = 'Erro ao processar operação'

    def __init__(self, mensagem=None):
        self.mensagem = mensagem or self.mensagem_padrao
        super().__init__(self.mensagem)

    def para_dict(self):
        return {
            'success': False,
            'error': self.mensagem,
            'codigo': self.codigo,
        }


class NaoEncontrado(ErroBoard):
    """Item, lista ou board inexistente (ou fora do contêiner informado)"""

    codigo = 'nao_encontrado'
    status_http = 404
    mensagem_padrao = 'Recurso não encontrado'


class AcessoNegado(ErroBoard):
    """Usuário sem o papel necessário no board"""

    codigo = 'acesso_negado'
    status_http = 403
    mensagem_padrao = 'Acesso negado'


class OperacaoInvalida(ErroBoard):
    """Movimento entre boards, lista de ids malformada, contêiner arquivado..."""

    codigo = 'operacao_invalida'
    status_http = 400
    mensagem_padrao = 'Operação inválida'


class FalhaPersistencia(ErroBoard):
    """A escrita no banco não foi concluída; nada foi gravado"""

    codigo = 'falha_persistencia'
    status_http = 500
    mensagem_padrao = 'Não foi possível salvar a alteração. Tente novamente.'
