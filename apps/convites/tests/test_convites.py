# apps/convites/tests/test_convites.py

import json
from datetime import timedelta
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from apps.board.tests.fabrica import DifusorFalso, criar_board, criar_usuario
from apps.convites.convite_service import ConviteService, convite_service
from apps.convites.models import Convite
from apps.core.exceptions import AcessoNegado, NaoEncontrado, OperacaoInvalida
from apps.core.models import Atividade


class ConviteServiceTestCase(TestCase):

    def setUp(self):
        self.ana = criar_usuario('ana')
        self.mel = criar_usuario('mel')
        self.board = criar_board(self.ana, 'Projeto', privado=True)
        self.difusor = DifusorFalso()
        self.service = ConviteService(difusor=self.difusor)


class EnviarTests(ConviteServiceTestCase):

    def test_enviar_notifica_o_convidado(self):
        with self.captureOnCommitCallbacks(execute=True):
            convite = self.service.enviar(self.ana, self.board.id, 'mel', 'leitor', 'Bem-vinda!')

        self.assertEqual((convite.status, convite.papel), ('pendente', 'leitor'))
        self.assertGreater(convite.expira_em, timezone.now() + timedelta(days=6))

        usuario_id, evento = self.difusor.notificacoes[-1]
        self.assertEqual(usuario_id, self.mel.id)
        self.assertEqual((evento.tipo, evento.convite_id), ('convite_recebido', convite.id))

    def test_nao_convida_a_si_mesmo(self):
        with self.assertRaises(OperacaoInvalida):
            self.service.enviar(self.ana, self.board.id, 'ana')

    def test_nao_convida_membro(self):
        self.board.adicionar_membro(self.mel, 'membro')

        with self.assertRaises(OperacaoInvalida):
            self.service.enviar(self.ana, self.board.id, 'mel')

    def test_um_convite_pendente_por_usuario(self):
        self.service.enviar(self.ana, self.board.id, 'mel')

        with self.assertRaises(OperacaoInvalida):
            self.service.enviar(self.ana, self.board.id, 'mel')

    def test_convite_vencido_nao_bloqueia_novo(self):
        antigo = self.service.enviar(self.ana, self.board.id, 'mel')
        Convite.objects.filter(id=antigo.id).update(expira_em=timezone.now() - timedelta(days=1))

        novo = self.service.enviar(self.ana, self.board.id, 'mel')

        antigo.refresh_from_db()
        self.assertEqual(antigo.status, 'cancelado')
        self.assertTrue(novo.pendente)

    def test_usuario_inexistente(self):
        with self.assertRaises(NaoEncontrado):
            self.service.enviar(self.ana, self.board.id, 'ninguem')

    def test_apenas_admin_convida(self):
        self.board.adicionar_membro(self.mel, 'membro')
        criar_usuario('eva')

        with self.assertRaises(AcessoNegado):
            self.service.enviar(self.mel, self.board.id, 'eva')

    def test_papel_invalido(self):
        with self.assertRaises(OperacaoInvalida):
            self.service.enviar(self.ana, self.board.id, 'mel', 'dono')


class ResponderTests(ConviteServiceTestCase):

    def setUp(self):
        super().setUp()
        self.convite = self.service.enviar(self.ana, self.board.id, 'mel', 'admin')

    def test_aceitar_torna_membro(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.service.aceitar(self.mel, self.convite.id)

        self.convite.refresh_from_db()
        self.assertEqual(self.convite.status, 'aceito')
        self.assertIsNotNone(self.convite.respondido_em)
        self.assertEqual(self.board.papel_do_usuario(self.mel), 'admin')
        self.assertTrue(Atividade.objects.filter(board=self.board, acao='entrou no board').exists())

        self.assertEqual(self.difusor.tipos, ['membro_adicionado'])
        usuario_id, evento = self.difusor.notificacoes[-1]
        self.assertEqual((usuario_id, evento.tipo, evento.status), (self.ana.id, 'convite_respondido', 'aceito'))

    def test_aceitar_convite_expirado(self):
        Convite.objects.filter(id=self.convite.id).update(expira_em=timezone.now() - timedelta(minutes=1))

        with self.assertRaises(OperacaoInvalida):
            self.service.aceitar(self.mel, self.convite.id)

        self.assertIsNone(self.board.papel_do_usuario(self.mel))

    def test_apenas_o_convidado_responde(self):
        eva = criar_usuario('eva')

        with self.assertRaises(AcessoNegado):
            self.service.aceitar(eva, self.convite.id)
        with self.assertRaises(AcessoNegado):
            self.service.recusar(eva, self.convite.id)

    def test_recusar(self):
        self.service.recusar(self.mel, self.convite.id)

        self.convite.refresh_from_db()
        self.assertEqual(self.convite.status, 'recusado')
        self.assertIsNone(self.board.papel_do_usuario(self.mel))

    def test_responder_duas_vezes(self):
        self.service.recusar(self.mel, self.convite.id)

        with self.assertRaises(OperacaoInvalida):
            self.service.aceitar(self.mel, self.convite.id)

    def test_cancelar(self):
        with self.assertRaises(AcessoNegado):
            self.service.cancelar(self.mel, self.convite.id)

        self.service.cancelar(self.ana, self.convite.id)

        self.convite.refresh_from_db()
        self.assertEqual(self.convite.status, 'cancelado')
        with self.assertRaises(OperacaoInvalida):
            self.service.cancelar(self.ana, self.convite.id)

    def test_listagens(self):
        self.assertEqual([c['id'] for c in self.service.recebidos(self.mel)], [self.convite.id])
        self.assertEqual([c['id'] for c in self.service.enviados(self.ana)], [self.convite.id])
        self.assertEqual(self.service.recebidos(self.ana), [])

        Convite.objects.filter(id=self.convite.id).update(expira_em=timezone.now() - timedelta(days=1))
        self.assertEqual(self.service.recebidos(self.mel), [])


class ConviteApiTests(TestCase):

    def setUp(self):
        self.ana = criar_usuario('ana')
        self.mel = criar_usuario('mel')
        self.board = criar_board(self.ana)

        patcher = mock.patch.object(convite_service, 'difusor', DifusorFalso())
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_fluxo_completo(self):
        self.client.force_login(self.ana)
        resposta = self.client.post(
            '/api/convites/',
            json.dumps({'board_id': self.board.id, 'username': 'mel', 'papel': 'membro'}),
            content_type='application/json',
        )
        self.assertEqual(resposta.status_code, 201)
        convite_id = resposta.json()['convite']['id']

        self.client.force_login(self.mel)
        recebidos = self.client.get('/api/convites/recebidos/').json()['convites']
        self.assertEqual(recebidos[0]['board']['titulo'], 'Projeto')

        resposta = self.client.post(f'/api/convites/{convite_id}/aceitar/')
        self.assertEqual(resposta.json()['convite']['status'], 'aceito')
        self.assertEqual(self.board.papel_do_usuario(self.mel), 'membro')

    def test_campos_obrigatorios(self):
        self.client.force_login(self.ana)

        resposta = self.client.post('/api/convites/', json.dumps({'board_id': self.board.id}),
                                    content_type='application/json')

        self.assertEqual(resposta.status_code, 400)
        self.assertEqual(resposta.json()['codigo'], 'operacao_invalida')

    def test_cancelar_via_api(self):
        convite = convite_service.enviar(self.ana, self.board.id, 'mel')
        self.client.force_login(self.ana)

        resposta = self.client.delete(f'/api/convites/{convite.id}/')

        self.assertEqual(resposta.status_code, 200)
        convite.refresh_from_db()
        self.assertEqual(convite.status, 'cancelado')
