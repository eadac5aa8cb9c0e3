# app/models/report.py
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.types import Integer, TypeDecorator

from app import db
from app.utils.errors import ValidationFailed


class ReportStatus(enum.IntEnum):
    """
    Status de um relato. Qualquer status pode ir para qualquer outro;
    a ordem só importa para ordenação e para os buckets do dashboard.
    """
    Submitted = 1
    InReview = 2
    InProgress = 3
    Resolved = 4
    Closed = 5

    @property
    def is_resolved(self):
        return self in RESOLVED_STATUSES

    @property
    def display_name(self):
        return {
            ReportStatus.Submitted: 'Submitted',
            ReportStatus.InReview: 'In Review',
            ReportStatus.InProgress: 'In Progress',
            ReportStatus.Resolved: 'Resolved',
            ReportStatus.Closed: 'Closed',
        }[self]

    @classmethod
    def parse(cls, value):
        """
        Converte o valor recebido da API para ReportStatus

        Aceita o próprio enum, o valor inteiro (1-5) ou o nome sem diferenciar
        maiúsculas e ignorando separadores ('in_review', 'In Review', 'inReview').

        Raises:
            ValidationFailed: valor não corresponde a nenhum status
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or value is None:
            raise ValidationFailed(f'Invalid status: {value!r}')
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValidationFailed(f'Invalid status: {value!r}')
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.parse(int(text))
            key = ''.join(ch for ch in text.lower() if ch not in '_- ')
            for status in cls:
                if status.name.lower() == key:
                    return status
        raise ValidationFailed(f'Invalid status: {value!r}')


RESOLVED_STATUSES = frozenset({ReportStatus.Resolved, ReportStatus.Closed})
PENDING_STATUSES = frozenset(set(ReportStatus) - RESOLVED_STATUSES)


class StatusType(TypeDecorator):
    """Guarda ReportStatus como inteiro para ordenar na ordem do ciclo de vida"""
    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(ReportStatus.parse(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return ReportStatus(value)


@dataclass(frozen=True)
class AuthenticatedSubmitter:
    """Relato enviado por um usuário logado"""
    user_id: int


@dataclass(frozen=True)
class AnonymousSubmitter:
    """Relato anônimo; os contatos só existem neste caso"""
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None


class Report(db.Model):
    __tablename__ = 'reports'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    address = db.Column(db.String(500), nullable=False)
    image_url = db.Column(db.String(500))  # Caminho/URL da imagem (opcional)

    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)

    status = db.Column(StatusType, nullable=False, default=ReportStatus.Submitted, index=True)
    admin_notes = db.Column(db.Text)

    # Timestamps
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime)
    resolved_at = db.Column(db.DateTime)

    # Contato para relatos anônimos
    contact_email = db.Column(db.String(200))
    contact_phone = db.Column(db.String(50))

    # Controle de concorrência otimista
    version = db.Column(db.Integer, nullable=False)

    # Relacionamentos
    category = db.relationship('Category', lazy='joined')

    __mapper_args__ = {'version_id_col': version}

    @property
    def is_anonymous(self):
        return self.user_id is None

    @property
    def has_image(self):
        return bool(self.image_url)

    @property
    def submitter(self):
        if self.user_id is not None:
            return AuthenticatedSubmitter(user_id=self.user_id)
        return AnonymousSubmitter(contact_email=self.contact_email, contact_phone=self.contact_phone)

    @submitter.setter
    def submitter(self, submitter):
        if isinstance(submitter, AuthenticatedSubmitter):
            self.user_id = submitter.user_id
            self.contact_email = None
            self.contact_phone = None
        elif isinstance(submitter, AnonymousSubmitter):
            self.user_id = None
            self.contact_email = submitter.contact_email or None
            self.contact_phone = submitter.contact_phone or None
        else:
            raise ValidationFailed('Submitter must be authenticated or anonymous')

    def days_since_created(self, now=None):
        """Dias inteiros (arredondado para baixo) desde a criação"""
        now = now or datetime.utcnow()
        return (now - self.created_at).days

    def to_dict(self, now=None):
        category = self.category
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'address': self.address,
            'reportImage': self.image_url or '',
            'categoryId': self.category_id,
            'categoryName': category.name if category else None,
            'categoryIcon': category.icon if category else None,
            'categoryColor': category.color if category else None,
            'userId': self.user_id,
            'userName': self.user.display_name if self.user is not None else 'Anonymous',
            'isAnonymous': self.is_anonymous,
            'status': self.status.name,
            'adminNotes': self.admin_notes,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
            'resolvedAt': self.resolved_at.isoformat() if self.resolved_at else None,
            'contactEmail': self.contact_email,
            'contactPhone': self.contact_phone,
            'hasImage': self.has_image,
            'daysSinceCreated': self.days_since_created(now),
        }

    def __repr__(self):
        return f'<Report {self.id} - {self.status.name if self.status else None}>'
