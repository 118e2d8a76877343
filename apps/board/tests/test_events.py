# apps/board/tests/test_events.py

from django.test import SimpleTestCase

from apps.board.events import (
    TIPOS_EVENTO,
    CursorMovido,
    ListaCriada,
    TarefaMovida,
    evento_de_mensagem,
)


class EventoTests(SimpleTestCase):

    def test_mensagem_tem_tipo_e_ordem_completa(self):
        evento = TarefaMovida(
            board_id=1, usuario_id=2, tarefa_id=3,
            lista_origem=10, lista_destino=11,
            ordem_origem=(4,), ordem_destino=(3, 5),
        )

        self.assertEqual(evento.para_mensagem(), {
            'tipo': 'tarefa_movida',
            'board_id': 1,
            'usuario_id': 2,
            'tarefa_id': 3,
            'lista_origem': 10,
            'lista_destino': 11,
            'ordem_origem': [4],
            'ordem_destino': [3, 5],
        })

    def test_reconstroi_evento_a_partir_da_mensagem(self):
        evento = ListaCriada(board_id=1, usuario_id=None, lista={'id': 7, 'titulo': 'Nova'}, ordem=(5, 7))

        recebido = evento_de_mensagem(evento.para_mensagem())

        self.assertIsInstance(recebido, ListaCriada)
        self.assertEqual(recebido, evento)

    def test_tipo_desconhecido_e_rejeitado(self):
        with self.assertRaises(ValueError):
            evento_de_mensagem({'tipo': 'tarefa_teleportada', 'board_id': 1, 'usuario_id': 1})

    def test_campo_ausente_e_rejeitado(self):
        mensagem = CursorMovido(board_id=1, usuario_id=1, nome='Ana', x=1, y=2, cor='#000000').para_mensagem()
        del mensagem['x']

        with self.assertRaises(ValueError):
            evento_de_mensagem(mensagem)

    def test_todos_os_eventos_registrados(self):
        esperados = {
            'listas_reordenadas', 'tarefas_reordenadas', 'tarefa_movida',
            'lista_criada', 'lista_atualizada', 'lista_arquivada', 'lista_excluida',
            'tarefa_criada', 'tarefa_atualizada', 'tarefa_excluida', 'comentario_adicionado',
            'board_atualizado', 'membro_adicionado', 'membro_removido', 'papel_atualizado',
            'usuario_entrou', 'usuario_saiu', 'cursor_movido',
            'convite_recebido', 'convite_respondido',
        }
        self.assertEqual(set(TIPOS_EVENTO), esperados)
