# apps/convites/apps.py

from django.apps import AppConfig


class ConvitesConfig(AppConfig):
    """Configuração da app Convites"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.convites'
    verbose_name = 'Convites'
