# apps/core/models.py

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Max
from django.utils import timezone
from PIL import Image, UnidentifiedImageError


class Usuario(AbstractUser):
    """
    Modelo de usuário customizado

    A emissão de sessão/login é a do próprio Django; aqui ficam apenas
    os dados de perfil usados pelo board (avatar, nome de exibição).
    """

    avatar = models.ImageField(upload_to='avatares/', blank=True, null=True)

    # === METADADOS ===
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'usuario'

    def save(self, *args, **kwargs):
        """
        Override do save para redimensionar avatar automaticamente
        """
        super().save(*args, **kwargs)

        if self.avatar:
            try:
                img = Image.open(self.avatar.path)
                if img.height > 300 or img.width > 300:
                    img.thumbnail((300, 300))
                    img.save(self.avatar.path)
            except (OSError, UnidentifiedImageError):
                pass  # Avatar inválido não impede salvar o usuário

    @property
    def nome_exibicao(self):
        return self.get_full_name() or self.username

    def get_boards_acessiveis(self):
        """
        Retorna boards não arquivados onde o usuário é dono ou membro
        """
        return Board.objects.filter(
            models.Q(dono=self) | models.Q(membros__usuario=self),
            arquivado=False
        ).distinct()

    def __str__(self):
        return self.nome_exibicao


class Board(models.Model):
    """
    Quadro Kanban colaborativo

    `ordem_listas` é a ordem explícita das listas ativas; o campo
    `posicao` de cada lista precisa reproduzir exatamente essa ordem.
    """

    titulo = models.CharField(max_length=100)
    descricao = models.TextField(max_length=500, blank=True)
    dono = models.ForeignKey(
        Usuario,
        on_delete=models.PROTECT,
        related_name='boards_proprios'
    )
    ordem_listas = models.JSONField(default=list, blank=True)
    cor_fundo = models.CharField(max_length=7, default='#0079bf')
    privado = models.BooleanField(default=False)
    arquivado = models.BooleanField(default=False)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['-atualizado_em']
        indexes = [
            models.Index(fields=['dono'], name='board_dono_id_0c8b1e_idx'),
            models.Index(fields=['-criado_em'], name='board_criado__5d1f3a_idx'),
        ]

    def __str__(self):
        return self.titulo

    # === MEMBROS E PAPÉIS ===

    def papel_do_usuario(self, usuario):
        """
        Retorna 'dono', o papel de MembroBoard, ou None se não participa
        """
        if usuario is None or not usuario.is_authenticated:
            return None

        if self.dono_id == usuario.id:
            return 'dono'

        membro = self.membros.filter(usuario=usuario).only('papel').first()
        return membro.papel if membro else None

    def eh_membro(self, usuario):
        return self.papel_do_usuario(usuario) is not None

    def adicionar_membro(self, usuario, papel='membro'):
        """
        Adiciona membro; ignora o dono e quem já participa
        """
        if usuario.id == self.dono_id:
            return None

        membro, _criado = MembroBoard.objects.get_or_create(
            board=self,
            usuario=usuario,
            defaults={'papel': papel}
        )
        return membro

    def remover_membro(self, usuario):
        self.membros.filter(usuario=usuario).delete()

    # === ATIVIDADES ===

    def registrar_atividade(self, usuario, acao, detalhes=''):
        """
        Insere atividade no topo do histórico e descarta as mais antigas
        além do limite configurado
        """
        atividade = Atividade.objects.create(
            board=self,
            usuario=usuario,
            acao=acao,
            detalhes=detalhes
        )

        limite = settings.SINCRO_ATIVIDADE_LIMITE
        excedentes = list(
            self.atividades.order_by('-criado_em', '-id').values_list('id', flat=True)[limite:]
        )
        if excedentes:
            Atividade.objects.filter(id__in=excedentes).delete()

        return atividade

    # === ORDEM ===

    def listas_ativas(self):
        return self.listas.filter(arquivada=False).order_by('posicao', 'criado_em', 'id')


class MembroBoard(models.Model):
    """Participação de um usuário em um board, com papel"""

    PAPEL_CHOICES = [
        ('admin', 'Administrador'),
        ('membro', 'Membro'),
        ('leitor', 'Leitor'),
    ]

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='membros'
    )
    usuario = models.ForeignKey(
        Usuario,
        on_delete=models.CASCADE,
        related_name='participacoes'
    )
    papel = models.CharField(max_length=10, choices=PAPEL_CHOICES, default='membro')
    entrou_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'membro_board'
        unique_together = ['board', 'usuario']
        ordering = ['entrou_em']

    def __str__(self):
        return f"{self.usuario} ({self.get_papel_display()}) - {self.board}"


class Lista(models.Model):
    """
    Lista (coluna) do board

    `ordem_tarefas` guarda a ordem explícita das tarefas; `posicao`
    ordena a lista entre as irmãs ativas do mesmo board.
    """

    titulo = models.CharField(max_length=100)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='listas'
    )
    ordem_tarefas = models.JSONField(default=list, blank=True)
    posicao = models.PositiveIntegerField(default=0)
    arquivada = models.BooleanField(default=False)
    cor = models.CharField(max_length=7, default='#dddddd')
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'lista'
        ordering = ['posicao', 'criado_em', 'id']
        indexes = [
            models.Index(fields=['board', 'posicao'], name='lista_board_i_7a2c4e_idx'),
            models.Index(fields=['board', 'arquivada'], name='lista_board_i_9e3b1d_idx'),
        ]

    def __str__(self):
        return f"{self.titulo} - {self.board.titulo}"

    @classmethod
    def proxima_posicao(cls, board):
        """Maior posição do board + 1, ou 0 se vazio"""
        maior = cls.objects.filter(board=board).aggregate(maior=Max('posicao'))['maior']
        return 0 if maior is None else maior + 1

    def tarefas_ordenadas(self):
        return self.tarefas.order_by('posicao', 'criado_em', 'id')


class Tarefa(models.Model):
    """Tarefa - pertence a exatamente uma lista por vez"""

    PRIORIDADE_CHOICES = [
        ('baixa', '🟢 Baixa'),
        ('media', '🟡 Média'),
        ('alta', '🟠 Alta'),
        ('urgente', '🔴 Urgente'),
    ]

    STATUS_CHOICES = [
        ('a_fazer', 'A fazer'),
        ('em_andamento', 'Em andamento'),
        ('revisao', 'Em revisão'),
        ('concluida', 'Concluída'),
    ]

    titulo = models.CharField(max_length=200)
    descricao = models.TextField(max_length=2000, blank=True)
    lista = models.ForeignKey(
        Lista,
        on_delete=models.CASCADE,
        related_name='tarefas'
    )
    # Desnormalizado para checagem de acesso sem join
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='tarefas'
    )
    posicao = models.PositiveIntegerField(default=0)
    responsaveis = models.ManyToManyField(
        Usuario,
        blank=True,
        related_name='tarefas_atribuidas'
    )
    criado_por = models.ForeignKey(
        Usuario,
        on_delete=models.PROTECT,
        related_name='tarefas_criadas'
    )
    prioridade = models.CharField(max_length=10, choices=PRIORIDADE_CHOICES, default='media')
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default='a_fazer')
    prazo = models.DateTimeField(null=True, blank=True)
    concluida = models.BooleanField(default=False)
    concluida_em = models.DateTimeField(null=True, blank=True)
    arquivada = models.BooleanField(default=False)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tarefa'
        ordering = ['posicao', 'criado_em', 'id']
        indexes = [
            models.Index(fields=['lista', 'posicao'], name='tarefa_lista_i_4f6a2b_idx'),
            models.Index(fields=['board'], name='tarefa_board_i_8c1d5e_idx'),
        ]

    def __str__(self):
        return self.titulo

    @classmethod
    def proxima_posicao(cls, lista):
        """Maior posição da lista + 1, ou 0 se vazia"""
        maior = cls.objects.filter(lista=lista).aggregate(maior=Max('posicao'))['maior']
        return 0 if maior is None else maior + 1

    @property
    def esta_atrasada(self):
        return bool(self.prazo and not self.concluida and self.prazo < timezone.now())

    def marcar_concluida(self):
        self.concluida = True
        self.concluida_em = timezone.now()
        self.status = 'concluida'

    def marcar_pendente(self):
        self.concluida = False
        self.concluida_em = None
        if self.status == 'concluida':
            self.status = 'a_fazer'


class Atividade(models.Model):
    """Registro do histórico de atividades do board (limitado)"""

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='atividades'
    )
    usuario = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='atividades'
    )
    acao = models.CharField(max_length=100)
    detalhes = models.TextField(blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'atividade'
        ordering = ['-criado_em', '-id']

    def __str__(self):
        return f"{self.usuario} {self.acao} em {self.criado_em:%d/%m/%Y %H:%M}"


class Comentario(models.Model):
    """Comentário em uma tarefa, em ordem cronológica"""

    tarefa = models.ForeignKey(
        Tarefa,
        on_delete=models.CASCADE,
        related_name='comentarios'
    )
    autor = models.ForeignKey(
        Usuario,
        on_delete=models.CASCADE,
        related_name='comentarios'
    )
    texto = models.TextField(max_length=1000)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'comentario'
        ordering = ['criado_em', 'id']

    def __str__(self):
        return f"{self.autor} em {self.tarefa}"
