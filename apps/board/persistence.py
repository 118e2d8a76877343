# apps/board/persistence.py

"""
Reconciliação da ordem com o banco

Toda escrita de ordem grava, dentro da mesma transação, a sequência
explícita do pai e as posições dos filhos. Nenhum lock de linha é
tomado: duas requisições concorrentes sobre a mesma lista resultam em
"última escrita vence".
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from apps.core.exceptions import ErroBoard, FalhaPersistencia, NaoEncontrado, OperacaoInvalida
from apps.core.models import Lista, Tarefa

from .ordering import renumerar

logger = logging.getLogger(__name__)


@contextmanager
def escrita_atomica(descricao):
    """
    Executa o bloco numa transação; erro de banco vira FalhaPersistencia
    (logado, sem retry) e nada é gravado
    """
    try:
        with transaction.atomic():
            yield
    except ErroBoard:
        raise
    except DatabaseError as e:
        logger.exception(f"❌ Falha de persistência ao {descricao}")
        raise FalhaPersistencia() from e


def carregar(modelo, pk, mensagem, **filtros):
    """Busca por id ou levanta NaoEncontrado"""
    try:
        return modelo.objects.get(pk=pk, **filtros)
    except (modelo.DoesNotExist, ValueError, TypeError):
        raise NaoEncontrado(mensagem)


def aplicar_posicoes(queryset, ordem):
    """
    Renumera 0..n-1 os objetos do queryset conforme a ordem dada

    Todos os ids da ordem precisam existir no queryset; caso contrário a
    ordem está desatualizada em relação ao banco.
    """
    posicoes = renumerar(ordem)
    objetos = list(queryset.filter(id__in=ordem))

    if len(objetos) != len(ordem):
        encontrados = {obj.id for obj in objetos}
        ausentes = [i for i in ordem if i not in encontrados]
        raise OperacaoInvalida(f'Ordem desatualizada - itens ausentes: {ausentes}')

    alterados = []
    for obj in objetos:
        nova = posicoes[obj.id]
        if obj.posicao != nova:
            obj.posicao = nova
            alterados.append(obj)

    if alterados:
        queryset.model.objects.bulk_update(alterados, ['posicao'])

    return len(alterados)


def gravar_ordem_tarefas(lista, ordem):
    """Sobrescreve Lista.ordem_tarefas e renumera as tarefas da lista"""
    lista.ordem_tarefas = list(ordem)
    lista.save(update_fields=['ordem_tarefas', 'atualizado_em'])
    aplicar_posicoes(Tarefa.objects.filter(lista=lista), lista.ordem_tarefas)


def gravar_ordem_listas(board, ordem):
    """Sobrescreve Board.ordem_listas e renumera as listas ativas"""
    board.ordem_listas = list(ordem)
    board.save(update_fields=['ordem_listas', 'atualizado_em'])
    aplicar_posicoes(Lista.objects.filter(board=board, arquivada=False), board.ordem_listas)
