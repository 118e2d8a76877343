# apps/convites/urls.py

from django.urls import path
from . import views

app_name = 'convites'

urlpatterns = [
    path('', views.enviar_convite_view, name='enviar'),
    path('recebidos/', views.convites_recebidos_view, name='recebidos'),
    path('enviados/', views.convites_enviados_view, name='enviados'),
    path('<int:convite_id>/aceitar/', views.aceitar_convite_view, name='aceitar'),
    path('<int:convite_id>/recusar/', views.recusar_convite_view, name='recusar'),
    path('<int:convite_id>/', views.cancelar_convite_view, name='cancelar'),
]
