# apps/board/tests/test_ordering.py

from datetime import datetime, timedelta
from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.board.ordering import (
    indice_entre_visiveis,
    inserir_na_sequencia,
    limitar_indice,
    mover_entre_visiveis,
    mover_na_sequencia,
    ordem_canonica,
    ordem_consistente,
    permutar_visiveis,
    remover_da_sequencia,
    renumerar,
    validar_ids,
    validar_permutacao,
)
from apps.core.exceptions import NaoEncontrado, OperacaoInvalida


def item(pk, posicao, minutos=0):
    return SimpleNamespace(pk=pk, posicao=posicao, criado_em=datetime(2024, 1, 1) + timedelta(minutes=minutos))


class OrdemCanonicaTests(SimpleTestCase):

    def test_ordena_por_posicao(self):
        itens = [item(1, 2), item(2, 0), item(3, 1)]
        self.assertEqual(ordem_canonica(itens), [2, 3, 1])

    def test_empate_desfeito_por_criacao_e_id(self):
        itens = [item(5, 0, minutos=2), item(4, 0, minutos=1), item(3, 0, minutos=1)]
        self.assertEqual(ordem_canonica(itens), [3, 4, 5])

    def test_lacunas_sao_validas(self):
        itens = [item(1, 10), item(2, 3)]
        self.assertEqual(ordem_canonica(itens), [2, 1])
        self.assertTrue(ordem_consistente([2, 1], itens))
        self.assertFalse(ordem_consistente([1, 2], itens))


class SequenciaTests(SimpleTestCase):

    def test_mover_para_o_inicio(self):
        self.assertEqual(mover_na_sequencia([1, 2, 3], 3, 0), [3, 1, 2])

    def test_mover_para_o_fim(self):
        self.assertEqual(mover_na_sequencia([1, 2, 3], 1, 2), [2, 3, 1])

    def test_indice_fora_do_intervalo_e_limitado(self):
        self.assertEqual(mover_na_sequencia([1, 2, 3], 1, 99), [2, 3, 1])
        self.assertEqual(mover_na_sequencia([1, 2, 3], 3, -5), [3, 1, 2])

    def test_mover_para_a_mesma_posicao_nao_altera(self):
        self.assertEqual(mover_na_sequencia([1, 2, 3], 2, 1), [1, 2, 3])

    def test_inserir_em_sequencia_vazia(self):
        self.assertEqual(inserir_na_sequencia([], 7, 0), [7])
        self.assertEqual(inserir_na_sequencia([], 7, 3), [7])

    def test_inserir_no_fim(self):
        self.assertEqual(inserir_na_sequencia([1, 2], 7, 2), [1, 2, 7])

    def test_remover_item_ausente(self):
        with self.assertRaises(NaoEncontrado):
            remover_da_sequencia([1, 2], 3)

    def test_limitar_indice(self):
        self.assertEqual(limitar_indice(-1, 3), 0)
        self.assertEqual(limitar_indice(5, 3), 3)
        self.assertEqual(limitar_indice(2, 3), 2)

    def test_renumerar_e_contiguo(self):
        self.assertEqual(renumerar([9, 4, 7]), {9: 0, 4: 1, 7: 2})


class VisiveisTests(SimpleTestCase):
    """9 está arquivado: existe na sequência, mas não conta no índice"""

    def test_indice_aponta_para_o_visivel(self):
        self.assertEqual(indice_entre_visiveis([9, 1, 2], 0, {9}), 1)
        self.assertEqual(indice_entre_visiveis([9, 1, 2], 1, {9}), 2)

    def test_alem_do_fim_vai_depois_do_ultimo_visivel(self):
        self.assertEqual(indice_entre_visiveis([1, 9], 1, {9}), 1)
        self.assertEqual(indice_entre_visiveis([1, 9], 7, {9}), 1)

    def test_sem_visiveis_vai_para_o_inicio(self):
        self.assertEqual(indice_entre_visiveis([9], 3, {9}), 0)
        self.assertEqual(indice_entre_visiveis([], 0, set()), 0)

    def test_mover_entre_visiveis(self):
        self.assertEqual(mover_entre_visiveis([9, 1, 2], 2, 0, {9}), [9, 2, 1])
        self.assertEqual(mover_entre_visiveis([9, 2, 1], 2, 1, {9}), [9, 1, 2])

    def test_permutar_mantem_as_vagas_dos_ocultos(self):
        self.assertEqual(permutar_visiveis([1, 9, 2, 3], [3, 1, 2], {9}), [3, 9, 1, 2])
        self.assertEqual(permutar_visiveis([1, 9, 2], [9, 2, 1], {9}), [9, 2, 1])

        with self.assertRaises(OperacaoInvalida):
            permutar_visiveis([1, 9, 2], [2], {9})


class ValidacaoTests(SimpleTestCase):

    def test_ids_numericos_em_texto_sao_aceitos(self):
        self.assertEqual(validar_ids(['3', 1, '2']), [3, 1, 2])

    def test_ids_invalidos(self):
        for entrada in ('1,2', [1, 'x'], [True], [None], {'a': 1}):
            with self.subTest(entrada=entrada):
                with self.assertRaises(OperacaoInvalida):
                    validar_ids(entrada)

    def test_permutacao_valida(self):
        self.assertEqual(validar_permutacao([1, 2, 3], [3, 1, 2]), [3, 1, 2])

    def test_permutacao_com_repetidos(self):
        with self.assertRaises(OperacaoInvalida):
            validar_permutacao([1, 2, 3], [1, 1, 2, 3])

    def test_permutacao_com_ids_faltando_ou_estranhos(self):
        with self.assertRaises(OperacaoInvalida):
            validar_permutacao([1, 2, 3], [1, 2])
        with self.assertRaises(OperacaoInvalida):
            validar_permutacao([1, 2, 3], [1, 2, 4])
