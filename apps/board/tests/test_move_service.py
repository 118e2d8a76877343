# apps/board/tests/test_move_service.py

from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from apps.board.client_state import EstadoBoardCliente
from apps.board.events import ListasReordenadas, TarefaMovida, TarefasReordenadas
from apps.board.move_service import MovimentoService
from apps.core.exceptions import AcessoNegado, FalhaPersistencia, NaoEncontrado, OperacaoInvalida
from apps.core.models import Atividade, Lista, Tarefa
from apps.core.utils import estado_board

from .fabrica import (
    DifusorFalso,
    criar_board,
    criar_lista,
    criar_usuario,
    titulos_da_ordem,
    titulos_por_posicao,
)


class MovimentoBaseTestCase(TestCase):

    def setUp(self):
        self.dono = criar_usuario('ana')
        self.board = criar_board(self.dono)
        self.difusor = DifusorFalso()
        self.service = MovimentoService(difusor=self.difusor)

    def tarefa(self, titulo):
        return Tarefa.objects.get(titulo=titulo)

    def assertOrdem(self, lista, titulos):
        """As duas representações da ordem precisam concordar"""
        lista.refresh_from_db()
        self.assertEqual(titulos_da_ordem(lista), titulos)
        self.assertEqual(titulos_por_posicao(lista), titulos)
        self.assertEqual(
            list(lista.tarefas.values_list('posicao', flat=True).order_by('posicao')),
            list(range(len(titulos)))
        )


class ReordenarDentroDaListaTests(MovimentoBaseTestCase):

    def test_mover_ultima_para_o_inicio(self):
        backlog = criar_lista(self.board, 'Backlog', ['X', 'Y', 'Z'])

        evento = self.service.mover_tarefa(self.dono, self.tarefa('Z').id, backlog.id, backlog.id, 0)

        self.assertOrdem(backlog, ['Z', 'X', 'Y'])
        self.assertIsInstance(evento, TarefasReordenadas)
        self.assertEqual(list(evento.ordem), [self.tarefa(t).id for t in ('Z', 'X', 'Y')])

    def test_mover_para_a_propria_posicao_renumera_sem_alterar(self):
        backlog = criar_lista(self.board, 'Backlog', ['X', 'Y', 'Z'])
        Tarefa.objects.filter(titulo='Z').update(posicao=40)

        self.service.mover_tarefa(self.dono, self.tarefa('Y').id, backlog.id, backlog.id, 1)

        self.assertOrdem(backlog, ['X', 'Y', 'Z'])

    def test_indice_alem_do_fim_vira_append(self):
        backlog = criar_lista(self.board, 'Backlog', ['X', 'Y', 'Z'])

        self.service.mover_tarefa(self.dono, self.tarefa('X').id, backlog.id, backlog.id, 50)

        self.assertOrdem(backlog, ['Y', 'Z', 'X'])

    def test_reordenacao_nao_registra_atividade(self):
        backlog = criar_lista(self.board, 'Backlog', ['X', 'Y'])

        self.service.mover_tarefa(self.dono, self.tarefa('Y').id, backlog.id, backlog.id, 0)

        self.assertFalse(Atividade.objects.filter(acao='moveu tarefa').exists())


class MoverEntreListasTests(MovimentoBaseTestCase):

    def setUp(self):
        super().setUp()
        self.todo = criar_lista(self.board, 'Todo', ['A', 'B'])
        self.doing = criar_lista(self.board, 'Doing', ['C'])

    def test_mover_para_o_inicio_de_outra_lista(self):
        b = self.tarefa('B')

        evento = self.service.mover_tarefa(self.dono, b.id, self.todo.id, self.doing.id, 0)

        self.assertOrdem(self.todo, ['A'])
        self.assertOrdem(self.doing, ['B', 'C'])
        b.refresh_from_db()
        self.assertEqual(b.lista_id, self.doing.id)

        self.assertIsInstance(evento, TarefaMovida)
        self.assertEqual(evento.lista_origem, self.todo.id)
        self.assertEqual(evento.lista_destino, self.doing.id)
        self.assertEqual(list(evento.ordem_origem), [self.tarefa('A').id])
        self.assertEqual(list(evento.ordem_destino), [b.id, self.tarefa('C').id])

    def test_tarefa_aparece_em_exatamente_uma_lista(self):
        b = self.tarefa('B')

        self.service.mover_tarefa(self.dono, b.id, self.todo.id, self.doing.id, 1)

        for lista in Lista.objects.filter(board=self.board):
            self.assertEqual(
                sorted(lista.ordem_tarefas),
                sorted(lista.tarefas.values_list('id', flat=True))
            )
        listas_com_b = [l for l in Lista.objects.all() if b.id in l.ordem_tarefas]
        self.assertEqual(len(listas_com_b), 1)

    def test_ida_e_volta_restaura_as_duas_listas(self):
        a = self.tarefa('A')

        self.service.mover_tarefa(self.dono, a.id, self.todo.id, self.doing.id, 1)
        self.service.mover_tarefa(self.dono, a.id, self.doing.id, self.todo.id, 0)

        self.assertOrdem(self.todo, ['A', 'B'])
        self.assertOrdem(self.doing, ['C'])

    def test_mover_para_lista_vazia(self):
        vazia = criar_lista(self.board, 'Vazia')

        self.service.mover_tarefa(self.dono, self.tarefa('A').id, self.todo.id, vazia.id, 0)

        self.assertOrdem(vazia, ['A'])
        self.assertOrdem(self.todo, ['B'])

    def test_mover_para_o_fim_de_lista_nao_vazia(self):
        self.service.mover_tarefa(self.dono, self.tarefa('A').id, self.todo.id, self.doing.id, 1)

        self.assertOrdem(self.doing, ['C', 'A'])

    def test_registra_atividade(self):
        self.service.mover_tarefa(self.dono, self.tarefa('B').id, self.todo.id, self.doing.id, 0)

        atividade = Atividade.objects.get(board=self.board, acao='moveu tarefa')
        self.assertIn('"B"', atividade.detalhes)
        self.assertIn('"Todo"', atividade.detalhes)
        self.assertIn('"Doing"', atividade.detalhes)

    def test_origem_errada_nao_altera_nada(self):
        c = self.tarefa('C')

        with self.assertRaises(NaoEncontrado):
            self.service.mover_tarefa(self.dono, c.id, self.todo.id, self.doing.id, 0)

        self.assertOrdem(self.todo, ['A', 'B'])
        self.assertOrdem(self.doing, ['C'])

    def test_tarefa_inexistente(self):
        with self.assertRaises(NaoEncontrado):
            self.service.mover_tarefa(self.dono, 999999, self.todo.id, self.doing.id, 0)

    def test_destino_em_outro_board(self):
        outro = criar_board(self.dono, 'Outro')
        estrangeira = criar_lista(outro, 'Estrangeira')

        with self.assertRaises(OperacaoInvalida):
            self.service.mover_tarefa(self.dono, self.tarefa('A').id, self.todo.id, estrangeira.id, 0)

        self.assertOrdem(self.todo, ['A', 'B'])
        self.assertEqual(estrangeira.tarefas.count(), 0)

    def test_destino_arquivado(self):
        Lista.objects.filter(id=self.doing.id).update(arquivada=True)

        with self.assertRaises(OperacaoInvalida):
            self.service.mover_tarefa(self.dono, self.tarefa('A').id, self.todo.id, self.doing.id, 0)

    def test_indice_invalido(self):
        for indice in ('primeiro', None, True):
            with self.subTest(indice=indice):
                with self.assertRaises(OperacaoInvalida):
                    self.service.mover_tarefa(self.dono, self.tarefa('A').id, self.todo.id, self.doing.id, indice)

    def test_tarefas_arquivadas_continuam_na_ordem(self):
        Tarefa.objects.filter(titulo='A').update(arquivada=True)

        self.service.mover_tarefa(self.dono, self.tarefa('B').id, self.todo.id, self.todo.id, 0)

        self.assertOrdem(self.todo, ['B', 'A'])


class PermissoesMovimentoTests(MovimentoBaseTestCase):

    def setUp(self):
        super().setUp()
        self.lista = criar_lista(self.board, 'Backlog', ['X', 'Y'])

    def test_leitor_nao_move(self):
        leitor = criar_usuario('leo')
        self.board.adicionar_membro(leitor, 'leitor')

        with self.assertRaises(AcessoNegado):
            self.service.mover_tarefa(leitor, self.tarefa('Y').id, self.lista.id, self.lista.id, 0)

        self.assertOrdem(self.lista, ['X', 'Y'])

    def test_estranho_nao_move(self):
        estranho = criar_usuario('eva')

        with self.assertRaises(AcessoNegado):
            self.service.reordenar_tarefas(estranho, self.lista.id, [self.tarefa('Y').id, self.tarefa('X').id])

    def test_membro_move(self):
        membro = criar_usuario('mel')
        self.board.adicionar_membro(membro, 'membro')

        self.service.mover_tarefa(membro, self.tarefa('Y').id, self.lista.id, self.lista.id, 0)

        self.assertOrdem(self.lista, ['Y', 'X'])

    def test_board_arquivado_rejeita_movimentos(self):
        self.board.arquivado = True
        self.board.save()

        with self.assertRaises(AcessoNegado):
            self.service.mover_tarefa(self.dono, self.tarefa('Y').id, self.lista.id, self.lista.id, 0)


class ReordenacaoCompletaTests(MovimentoBaseTestCase):

    def setUp(self):
        super().setUp()
        self.lista = criar_lista(self.board, 'Backlog', ['X', 'Y', 'Z'])
        self.ids = {t: self.tarefa(t).id for t in ('X', 'Y', 'Z')}

    def test_reordenar_tarefas(self):
        ids = self.ids
        evento = self.service.reordenar_tarefas(self.dono, self.lista.id, [ids['Y'], ids['Z'], ids['X']])

        self.assertOrdem(self.lista, ['Y', 'Z', 'X'])
        self.assertEqual(evento.lista_id, self.lista.id)

    def test_reordenar_para_a_ordem_atual_e_idempotente(self):
        Tarefa.objects.filter(id=self.ids['Z']).update(posicao=17)
        ordem = [self.ids['X'], self.ids['Y'], self.ids['Z']]

        self.service.reordenar_tarefas(self.dono, self.lista.id, ordem)
        self.service.reordenar_tarefas(self.dono, self.lista.id, ordem)

        self.assertOrdem(self.lista, ['X', 'Y', 'Z'])

    def test_permutacao_incompleta_e_rejeitada(self):
        with self.assertRaises(OperacaoInvalida):
            self.service.reordenar_tarefas(self.dono, self.lista.id, [self.ids['X'], self.ids['Y']])

        self.assertOrdem(self.lista, ['X', 'Y', 'Z'])

    def test_ids_repetidos_sao_rejeitados(self):
        ids = self.ids
        with self.assertRaises(OperacaoInvalida):
            self.service.reordenar_tarefas(self.dono, self.lista.id, [ids['X'], ids['X'], ids['Y'], ids['Z']])

    def test_ultima_escrita_vence(self):
        ids = self.ids

        self.service.reordenar_tarefas(self.dono, self.lista.id, [ids['Z'], ids['Y'], ids['X']])
        self.service.reordenar_tarefas(self.dono, self.lista.id, [ids['Y'], ids['X'], ids['Z']])

        self.assertOrdem(self.lista, ['Y', 'X', 'Z'])


class TarefasArquivadasTests(MovimentoBaseTestCase):
    """O índice de destino conta só as tarefas visíveis"""

    def setUp(self):
        super().setUp()
        self.todo = criar_lista(self.board, 'Todo', ['A', 'B', 'C'])
        self.doing = criar_lista(self.board, 'Doing', ['X', 'Y'])
        Tarefa.objects.filter(titulo__in=['A', 'X']).update(arquivada=True)

    def visiveis(self, lista):
        lista.refresh_from_db()
        return [t for t in titulos_da_ordem(lista) if t not in ('A', 'X')]

    def test_mover_depois_da_ultima_visivel(self):
        self.service.mover_tarefa(self.dono, self.tarefa('C').id, self.todo.id, self.todo.id, 0)
        self.assertEqual(self.visiveis(self.todo), ['C', 'B'])

        self.service.mover_tarefa(self.dono, self.tarefa('C').id, self.todo.id, self.todo.id, 1)

        self.assertEqual(self.visiveis(self.todo), ['B', 'C'])
        self.assertOrdem(self.todo, ['A', 'B', 'C'])

    def test_mover_para_outra_lista_com_arquivada(self):
        self.service.mover_tarefa(self.dono, self.tarefa('B').id, self.todo.id, self.doing.id, 1)
        self.assertOrdem(self.doing, ['X', 'Y', 'B'])

        self.service.mover_tarefa(self.dono, self.tarefa('C').id, self.todo.id, self.doing.id, 0)
        self.assertOrdem(self.doing, ['X', 'C', 'Y', 'B'])
        self.assertOrdem(self.todo, ['A'])

    def test_reordenar_so_as_visiveis(self):
        ids = [self.tarefa('C').id, self.tarefa('B').id]

        evento = self.service.reordenar_tarefas(self.dono, self.todo.id, ids)

        self.assertOrdem(self.todo, ['A', 'C', 'B'])
        self.assertEqual(list(evento.ordem), [self.tarefa(t).id for t in ('A', 'C', 'B')])

    def test_cliente_e_servidor_concordam(self):
        estado = EstadoBoardCliente.de_snapshot(estado_board(self.board))
        c = self.tarefa('C').id

        estado.mover_tarefa(c, self.todo.id, self.doing.id, 0)
        evento = self.service.mover_tarefa(self.dono, c, self.todo.id, self.doing.id, 0)

        self.assertEqual(estado.ordem_tarefas[self.doing.id], list(evento.ordem_destino))
        self.assertEqual(estado.ordem_tarefas[self.todo.id], list(evento.ordem_origem))


class MoverListaTests(MovimentoBaseTestCase):

    def setUp(self):
        super().setUp()
        self.a = criar_lista(self.board, 'A')
        self.b = criar_lista(self.board, 'B')
        self.c = criar_lista(self.board, 'C')

    def ordem_por_posicao(self):
        return list(self.board.listas_ativas().values_list('id', flat=True))

    def test_mover_lista(self):
        evento = self.service.mover_lista(self.dono, self.c.id, self.board.id, 0)

        self.board.refresh_from_db()
        self.assertEqual(self.board.ordem_listas, [self.c.id, self.a.id, self.b.id])
        self.assertEqual(self.ordem_por_posicao(), self.board.ordem_listas)
        self.assertIsInstance(evento, ListasReordenadas)

    def test_reordenar_listas(self):
        self.service.reordenar_listas(self.dono, self.board.id, [self.b.id, self.c.id, self.a.id])

        self.board.refresh_from_db()
        self.assertEqual(self.board.ordem_listas, [self.b.id, self.c.id, self.a.id])
        self.assertEqual(self.ordem_por_posicao(), self.board.ordem_listas)

    def test_lista_de_outro_board(self):
        outro = criar_board(self.dono, 'Outro')
        estrangeira = criar_lista(outro, 'X')

        with self.assertRaises(NaoEncontrado):
            self.service.mover_lista(self.dono, estrangeira.id, self.board.id, 0)

    def test_lista_arquivada_nao_e_reordenada(self):
        Lista.objects.filter(id=self.a.id).update(arquivada=True)

        with self.assertRaises(OperacaoInvalida):
            self.service.mover_lista(self.dono, self.a.id, self.board.id, 1)

    def test_reordenar_listas_exige_permutacao_das_ativas(self):
        with self.assertRaises(OperacaoInvalida):
            self.service.reordenar_listas(self.dono, self.board.id, [self.a.id, self.b.id])


class PersistenciaEDifusaoTests(MovimentoBaseTestCase):

    def setUp(self):
        super().setUp()
        self.todo = criar_lista(self.board, 'Todo', ['A', 'B'])
        self.doing = criar_lista(self.board, 'Doing', ['C'])

    def test_falha_de_banco_nao_grava_nada(self):
        b = self.tarefa('B')

        with mock.patch('django.db.models.query.QuerySet.bulk_update', side_effect=DatabaseError('disco cheio')):
            with self.assertRaises(FalhaPersistencia):
                self.service.mover_tarefa(self.dono, b.id, self.todo.id, self.doing.id, 0)

        b.refresh_from_db()
        self.assertEqual(b.lista_id, self.todo.id)
        self.assertOrdem(self.todo, ['A', 'B'])
        self.assertOrdem(self.doing, ['C'])
        self.assertFalse(Atividade.objects.filter(acao='moveu tarefa').exists())

    def test_falha_de_banco_nao_difunde(self):
        with mock.patch('django.db.models.query.QuerySet.bulk_update', side_effect=DatabaseError('falhou')):
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                with self.assertRaises(FalhaPersistencia):
                    self.service.mover_tarefa(self.dono, self.tarefa('B').id, self.todo.id, self.doing.id, 0)

        self.assertEqual(callbacks, [])
        self.assertEqual(self.difusor.emitidos, [])

    def test_evento_emitido_somente_apos_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            self.service.mover_tarefa(
                self.dono, self.tarefa('B').id, self.todo.id, self.doing.id, 0, origem='canal-ana'
            )
            self.assertEqual(self.difusor.emitidos, [])

        self.assertEqual(len(callbacks), 1)
        callbacks[0]()

        evento, origem = self.difusor.emitidos[0]
        self.assertEqual(evento.tipo, 'tarefa_movida')
        self.assertEqual(evento.board_id, self.board.id)
        self.assertEqual(origem, 'canal-ana')

    def test_erro_de_validacao_nao_difunde(self):
        with self.captureOnCommitCallbacks(execute=True):
            with self.assertRaises(NaoEncontrado):
                self.service.mover_tarefa(self.dono, self.tarefa('C').id, self.todo.id, self.doing.id, 0)

        self.assertEqual(self.difusor.emitidos, [])
