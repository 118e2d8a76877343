import apps.convites.models
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Convite',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('papel', models.CharField(choices=[('admin', 'Administrador'), ('membro', 'Membro'), ('leitor', 'Leitor')], default='membro', max_length=10)),
                ('status', models.CharField(choices=[('pendente', 'Pendente'), ('aceito', 'Aceito'), ('recusado', 'Recusado'), ('cancelado', 'Cancelado')], default='pendente', max_length=10)),
                ('mensagem', models.TextField(blank=True, max_length=500)),
                ('expira_em', models.DateTimeField(default=apps.convites.models._expiracao_padrao)),
                ('respondido_em', models.DateTimeField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('board', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='convites', to='core.board')),
                ('convidado', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='convites_recebidos', to=settings.AUTH_USER_MODEL)),
                ('convidante', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='convites_enviados', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'convite',
                'ordering': ['-criado_em', '-id'],
                'indexes': [
                    models.Index(fields=['convidado', 'status'], name='convite_convida_3b7e2a_idx'),
                    models.Index(fields=['expira_em'], name='convite_expira__6d4c1f_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'pendente')), fields=('board', 'convidado'), name='convite_pendente_unico'),
                ],
            },
        ),
    ]
