# apps/board/ordering.py

"""
Coleções ordenadas - listas de um board e tarefas de uma lista

A ordem de uma coleção existe em duas formas que precisam concordar:
- a sequência explícita de ids guardada no pai (Board.ordem_listas,
  Lista.ordem_tarefas)
- o inteiro `posicao` de cada filho

Toda operação de movimento produz uma nova sequência e renumera os
filhos 0..n-1 a partir dela. Lacunas nas posições (após exclusões) são
válidas; só a ordem relativa importa.
"""

from typing import Dict, Iterable, List, Sequence, Set

from apps.core.exceptions import NaoEncontrado, OperacaoInvalida


def chave_ordenacao(item):
    """Posição, com desempate estável por criação e id"""
    return (item.posicao, item.criado_em, item.pk)


def ordem_canonica(itens: Iterable) -> List[int]:
    """Ids dos itens ordenados pela chave canônica (ordem total)"""
    return [item.pk for item in sorted(itens, key=chave_ordenacao)]


def limitar_indice(indice: int, tamanho: int) -> int:
    """Restringe o índice de destino ao intervalo [0, tamanho]"""
    return max(0, min(indice, tamanho))


def remover_da_sequencia(ids: Sequence[int], item_id: int) -> List[int]:
    if item_id not in ids:
        raise NaoEncontrado(f'Item {item_id} não pertence à coleção de origem')
    return [i for i in ids if i != item_id]


def inserir_na_sequencia(ids: Sequence[int], item_id: int, indice: int) -> List[int]:
    nova = list(ids)
    nova.insert(limitar_indice(indice, len(nova)), item_id)
    return nova


def mover_na_sequencia(ids: Sequence[int], item_id: int, indice: int) -> List[int]:
    """
    Reordena um item dentro da mesma coleção

    O índice é interpretado sobre a sequência já sem o item, então vale
    [0, len(ids) - 1].
    """
    restante = remover_da_sequencia(ids, item_id)
    return inserir_na_sequencia(restante, item_id, indice)


def indice_entre_visiveis(ids: Sequence[int], indice: int, ocultos: Set[int]) -> int:
    """
    Traduz um índice contado só sobre os itens visíveis para um índice na
    sequência completa

    Tarefas arquivadas continuam na sequência mas não aparecem para o
    cliente, que solta o card relativo ao que vê. O item entra logo antes
    do visível que ocupa `indice`; depois do último visível quando o
    índice passa do fim; no início quando nada é visível.
    """
    visiveis = [i for i in ids if i not in ocultos]
    indice = limitar_indice(indice, len(visiveis))

    if indice < len(visiveis):
        return list(ids).index(visiveis[indice])
    if visiveis:
        return list(ids).index(visiveis[-1]) + 1
    return 0


def inserir_entre_visiveis(ids: Sequence[int], item_id: int, indice: int, ocultos: Set[int]) -> List[int]:
    return inserir_na_sequencia(ids, item_id, indice_entre_visiveis(ids, indice, ocultos))


def mover_entre_visiveis(ids: Sequence[int], item_id: int, indice: int, ocultos: Set[int]) -> List[int]:
    """Como `mover_na_sequencia`, com o índice relativo aos visíveis"""
    restante = remover_da_sequencia(ids, item_id)
    return inserir_entre_visiveis(restante, item_id, indice, ocultos)


def permutar_visiveis(atual: Sequence[int], proposta: Sequence[int], ocultos: Set[int]) -> List[int]:
    """
    Aplica uma nova ordem dos itens visíveis; os ocultos mantêm suas vagas

    Aceita também a permutação da sequência completa.
    """
    proposta = list(proposta)
    if set(proposta) == set(atual):
        return validar_permutacao(atual, proposta)

    visiveis = [i for i in atual if i not in ocultos]
    restantes = iter(validar_permutacao(visiveis, proposta))
    return [i if i in ocultos else next(restantes) for i in atual]


def renumerar(ids: Sequence[int]) -> Dict[int, int]:
    """Mapeia cada id para sua nova posição (índice na sequência)"""
    return {item_id: posicao for posicao, item_id in enumerate(ids)}


def validar_ids(ids) -> List[int]:
    """
    Normaliza uma lista de ids vinda do cliente

    Aceita inteiros ou strings numéricas; qualquer outra coisa é
    OperacaoInvalida.
    """
    if not isinstance(ids, (list, tuple)):
        raise OperacaoInvalida('A lista de ids deve ser um array')

    normalizados = []
    for valor in ids:
        if isinstance(valor, bool):
            raise OperacaoInvalida(f'Id inválido: {valor!r}')
        try:
            normalizados.append(int(valor))
        except (TypeError, ValueError):
            raise OperacaoInvalida(f'Id inválido: {valor!r}')
    return normalizados


def validar_permutacao(atual: Sequence[int], proposta: Sequence[int]) -> List[int]:
    """
    Garante que a ordem proposta contém exatamente os mesmos ids da atual,
    sem repetição

    Returns:
        a ordem proposta como lista
    """
    proposta = list(proposta)

    if len(set(proposta)) != len(proposta):
        raise OperacaoInvalida('A nova ordem contém ids repetidos')

    if set(proposta) != set(atual):
        faltando = sorted(set(atual) - set(proposta))
        estranhos = sorted(set(proposta) - set(atual))
        raise OperacaoInvalida(
            f'A nova ordem não corresponde à coleção atual '
            f'(faltando: {faltando}, desconhecidos: {estranhos})'
        )

    return proposta


def ordem_consistente(ids: Sequence[int], itens: Iterable) -> bool:
    """
    Verifica a invariante principal: ordenar os itens pela posição
    reproduz exatamente a sequência explícita
    """
    return ordem_canonica(itens) == list(ids)
