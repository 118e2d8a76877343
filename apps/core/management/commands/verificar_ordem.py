# apps/core/management/commands/verificar_ordem.py

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.board.ordering import ordem_canonica, ordem_consistente
from apps.board.persistence import gravar_ordem_listas, gravar_ordem_tarefas
from apps.core.models import Board


def reconstruir_ordem(ordem_atual, itens):
    """
    Mantém os ids válidos na ordem explícita e acrescenta ao fim os
    itens que estavam fora dela (na ordem canônica)
    """
    existentes = {item.pk for item in itens}
    vistos = set()
    nova = []
    for item_id in ordem_atual:
        if item_id in existentes and item_id not in vistos:
            nova.append(item_id)
            vistos.add(item_id)
    nova.extend(i for i in ordem_canonica(itens) if i not in vistos)
    return nova


class Command(BaseCommand):
    help = 'Verifica se as posições de listas e tarefas concordam com a ordem explícita'

    def add_arguments(self, parser):
        parser.add_argument(
            '--corrigir',
            action='store_true',
            help='Regrava as posições a partir da ordem explícita',
        )
        parser.add_argument('--board', type=int, help='Verificar apenas este board')

    def handle(self, *args, **options):
        corrigir = options['corrigir']
        boards = Board.objects.all().order_by('id')
        if options.get('board'):
            boards = boards.filter(id=options['board'])

        self.stdout.write('🔍 Verificando ordem de listas e tarefas...')

        problemas = 0
        for board in boards:
            problemas += self._verificar_board(board, corrigir)

        if problemas == 0:
            self.stdout.write(self.style.SUCCESS('✅ Nenhuma divergência encontrada'))
        elif corrigir:
            self.stdout.write(self.style.SUCCESS(f'✅ {problemas} divergência(s) corrigida(s)'))
        else:
            raise CommandError(f'{problemas} divergência(s) encontrada(s) - use --corrigir')

    def _verificar_board(self, board, corrigir):
        problemas = 0

        listas = list(board.listas.filter(arquivada=False))
        if not ordem_consistente(board.ordem_listas, listas):
            problemas += 1
            self.stdout.write(self.style.WARNING(
                f'  ⚠️ Board {board.id} "{board.titulo}": ordem_listas={board.ordem_listas} '
                f'posições={ordem_canonica(listas)}'
            ))
            if corrigir:
                with transaction.atomic():
                    gravar_ordem_listas(board, reconstruir_ordem(board.ordem_listas, listas))

        for lista in board.listas.all():
            tarefas = list(lista.tarefas.all())
            if ordem_consistente(lista.ordem_tarefas, tarefas):
                continue

            problemas += 1
            self.stdout.write(self.style.WARNING(
                f'  ⚠️ Lista {lista.id} "{lista.titulo}": ordem_tarefas={lista.ordem_tarefas} '
                f'posições={ordem_canonica(tarefas)}'
            ))
            if corrigir:
                with transaction.atomic():
                    gravar_ordem_tarefas(lista, reconstruir_ordem(lista.ordem_tarefas, tarefas))

        return problemas
