# Importar todos os models
from app import db
from .user import User
from .category import Category, seed_categories
from .report import (
    Report, ReportStatus, RESOLVED_STATUSES, PENDING_STATUSES,
    AuthenticatedSubmitter, AnonymousSubmitter,
)

__all__ = [
    'db', 'User', 'Category', 'seed_categories', 'Report', 'ReportStatus',
    'RESOLVED_STATUSES', 'PENDING_STATUSES', 'AuthenticatedSubmitter', 'AnonymousSubmitter',
]
