# apps/core/utils.py

import hashlib
import json
from typing import Dict, List, Optional

from .exceptions import OperacaoInvalida


def gerar_cor_usuario(username: str) -> str:
    """
    Gera uma cor consistente baseada no username
    Usada nos cursores ao vivo e avatares sem foto
    """
    hash_hex = hashlib.md5(username.encode()).hexdigest()
    return f"#{hash_hex[:6]}"


def _data_iso(valor) -> Optional[str]:
    return valor.isoformat() if valor else None


def serializar_usuario(usuario) -> Optional[Dict]:
    if usuario is None:
        return None
    return {
        'id': usuario.id,
        'username': usuario.username,
        'nome': usuario.nome_exibicao,
        'avatar': usuario.avatar.url if usuario.avatar else None,
    }


def serializar_tarefa(tarefa) -> Dict:
    return {
        'id': tarefa.id,
        'titulo': tarefa.titulo,
        'descricao': tarefa.descricao,
        'lista_id': tarefa.lista_id,
        'board_id': tarefa.board_id,
        'posicao': tarefa.posicao,
        'prioridade': tarefa.prioridade,
        'status': tarefa.status,
        'prazo': _data_iso(tarefa.prazo),
        'concluida': tarefa.concluida,
        'concluida_em': _data_iso(tarefa.concluida_em),
        'arquivada': tarefa.arquivada,
        'atrasada': tarefa.esta_atrasada,
        'responsaveis': [u.id for u in tarefa.responsaveis.all()],
        'criado_por': tarefa.criado_por_id,
    }


def serializar_lista(lista, tarefas: Optional[List] = None) -> Dict:
    dados = {
        'id': lista.id,
        'titulo': lista.titulo,
        'board_id': lista.board_id,
        'posicao': lista.posicao,
        'cor': lista.cor,
        'arquivada': lista.arquivada,
        'ordem_tarefas': list(lista.ordem_tarefas),
    }
    if tarefas is not None:
        dados['tarefas'] = [serializar_tarefa(t) for t in tarefas]
    return dados


def serializar_board(board) -> Dict:
    return {
        'id': board.id,
        'titulo': board.titulo,
        'descricao': board.descricao,
        'dono': board.dono_id,
        'cor_fundo': board.cor_fundo,
        'privado': board.privado,
        'arquivado': board.arquivado,
        'ordem_listas': list(board.ordem_listas),
    }


def serializar_comentario(comentario) -> Dict:
    return {
        'id': comentario.id,
        'tarefa_id': comentario.tarefa_id,
        'autor': serializar_usuario(comentario.autor),
        'texto': comentario.texto,
        'criado_em': _data_iso(comentario.criado_em),
    }


def serializar_atividade(atividade) -> Dict:
    return {
        'id': atividade.id,
        'usuario': serializar_usuario(atividade.usuario),
        'acao': atividade.acao,
        'detalhes': atividade.detalhes,
        'criado_em': _data_iso(atividade.criado_em),
    }


def estado_board(board, papel: Optional[str] = None) -> Dict:
    """
    Snapshot completo do board: listas ativas na ordem canônica, cada
    uma com suas tarefas não arquivadas, mais membros

    `ordem_tarefas` traz a ordem completa; `tarefas_arquivadas` diz quais
    ids dela ficam ocultos, para o cliente contar índices só entre os
    visíveis.

    Usado no GET do board e no `sync_board` após reconexão.
    """
    listas = board.listas_ativas().prefetch_related('tarefas__responsaveis')

    listas_data = []
    for lista in listas:
        tarefas = sorted(
            (t for t in lista.tarefas.all() if not t.arquivada),
            key=lambda t: (t.posicao, t.criado_em, t.id)
        )
        dados_lista = serializar_lista(lista, tarefas)
        dados_lista['tarefas_arquivadas'] = [t.id for t in lista.tarefas.all() if t.arquivada]
        listas_data.append(dados_lista)

    dados = serializar_board(board)
    dados['listas'] = listas_data
    dados['membros'] = [
        {**serializar_usuario(m.usuario), 'papel': m.papel}
        for m in board.membros.select_related('usuario')
    ]
    dados['papel'] = papel
    return dados


def corpo_json(request) -> Dict:
    """Corpo da requisição como dict; vazio vira {}"""
    if not request.body:
        return {}
    try:
        dados = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise OperacaoInvalida('JSON inválido')
    if not isinstance(dados, dict):
        raise OperacaoInvalida('O corpo da requisição deve ser um objeto JSON')
    return dados


def exigir_campo(dados: Dict, campo: str):
    if campo not in dados:
        raise OperacaoInvalida(f'Campo obrigatório ausente: {campo}')
    return dados[campo]
