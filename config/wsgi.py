# config/wsgi.py

"""
WSGI para o admin e a API HTTP; WebSockets exigem o servidor ASGI
(config.asgi)
"""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.production')

application = get_wsgi_application()
