# apps/core/management/commands/seed.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.board.board_service import board_service
from apps.core.models import Board, Usuario

LISTAS_DEMO = {
    'A fazer': ['Definir escopo', 'Levantar requisitos', 'Montar backlog'],
    'Em andamento': ['Protótipo do quadro', 'API de movimentação'],
    'Concluído': ['Configurar repositório'],
}


class Command(BaseCommand):
    help = 'Cria usuários, board, listas e tarefas de demonstração'

    def add_arguments(self, parser):
        parser.add_argument('--senha', default='sincro123', help='Senha dos usuários demo')

    def handle(self, *args, **options):
        self.stdout.write('🌱 Criando dados de demonstração...')

        with transaction.atomic():
            dono = self._usuario('demo', 'demo@sincro.local', 'Demo', options['senha'])
            colega = self._usuario('colega', 'colega@sincro.local', 'Colega', options['senha'])

            if Board.objects.filter(dono=dono, titulo='Board de demonstração').exists():
                self.stdout.write(self.style.WARNING('⚠️ Board de demonstração já existe - nada a fazer'))
                return

            board = board_service.criar_board(
                dono, 'Board de demonstração', descricao='Arraste listas e tarefas para reordenar'
            )
            board_service.adicionar_membro(dono, board.id, colega.email, 'membro')

            for titulo_lista, tarefas in LISTAS_DEMO.items():
                lista = board_service.criar_lista(dono, board.id, titulo_lista)
                for titulo in tarefas:
                    dados = {'titulo': titulo}
                    if titulo_lista == 'Concluído':
                        dados['concluida'] = True
                    board_service.criar_tarefa(dono, lista.id, dados)

        self.stdout.write(self.style.SUCCESS(
            f'\n✅ Dados criados!\n'
            f'  Board: {board.titulo} (id {board.id})\n'
            f'  Usuários: demo / colega (senha: {options["senha"]})\n'
        ))

    def _usuario(self, username, email, nome, senha):
        usuario, criado = Usuario.objects.get_or_create(
            username=username,
            defaults={'email': email, 'first_name': nome},
        )
        if criado:
            usuario.set_password(senha)
            usuario.save()
            self.stdout.write(f'  👤 Usuário criado: {username}')
        return usuario
