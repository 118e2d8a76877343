#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Sincro Board - Kanban colaborativo em tempo real
"""

import os
import sys


def main():
    """Run administrative tasks."""

    # Configuração padrão para desenvolvimento
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Comandos customizados do Sincro Board
    if len(sys.argv) > 1:
        command = sys.argv[1]

        # Comando de setup inicial
        if command == 'setup':
            print("🚀 Configurando Sincro Board...")

            print("📊 Aplicando migrações...")
            if os.system(f'{sys.executable} manage.py migrate') != 0:
                print("❌ Erro nas migrações")
                return

            print("📁 Coletando arquivos estáticos...")
            os.system(f'{sys.executable} manage.py collectstatic --noinput')

            print("🌱 Populando banco com dados demo...")
            if os.system(f'{sys.executable} manage.py seed') == 0:
                print("✅ Setup concluído!")
                print("🔑 Usuários demo: demo / colega (senha: sincro123)")
            else:
                print("⚠️  Setup parcial concluído (sem dados demo)")
            return

        # Comando de configuração do banco
        elif command == 'setup-db':
            print("🐘 Configurando PostgreSQL...")

            commands = [
                "CREATE USER sincro_user WITH PASSWORD 'sincro123';",
                "CREATE DATABASE sincro_board OWNER sincro_user;",
                "GRANT ALL PRIVILEGES ON DATABASE sincro_board TO sincro_user;",
                "ALTER USER sincro_user CREATEDB;"
            ]

            for cmd in commands:
                print(f"Executando: {cmd}")
                if os.system(f'psql -U postgres -h localhost -c "{cmd}"') != 0:
                    print("⚠️  Comando pode ter falhado (normal se já existir)")

            print("🧪 Testando conexão...")
            if os.system('psql -U sincro_user -h localhost -d sincro_board -c "SELECT version();"') == 0:
                print("✅ PostgreSQL configurado com sucesso!")
                print("📊 Execute agora: python manage.py setup")
            else:
                print("❌ Erro na configuração. Verifique se o PostgreSQL está rodando e o psql no PATH")
            return

        elif command == 'backup':
            print("💾 Criando backup do banco...")
            from datetime import datetime
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            backup_file = f"backup_sincro_{timestamp}.json"
            os.system(f'{sys.executable} manage.py dumpdata --indent 2 > {backup_file}')
            print(f"✅ Backup criado: {backup_file}")
            return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
