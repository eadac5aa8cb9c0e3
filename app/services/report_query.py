# app/services/report_query.py
"""
Busca de relatos com filtros, ordenação e paginação

Os parâmetros vêm crus da query string e são tratados como sugestões:
valores malformados são normalizados ou ignorados, nunca geram erro.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional

from flask import current_app
from sqlalchemy import and_, or_

from app.models import Report, ReportStatus, Category
from app.utils.errors import ValidationFailed, translate_store_errors

TRUE_VALUES = {'true', '1', 'yes', 'on'}
FALSE_VALUES = {'false', '0', 'no', 'off'}


def parse_bool(value):
    """Converte 'true'/'false'/'1'/'0'... para bool; qualquer outra coisa vira None"""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return None


def parse_int(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_datetime(value, end_of_day=False):
    """
    Converte uma data ISO-8601 para datetime

    Uma data sem horário como limite final ('2025-01-31') cobre o dia inteiro.
    """
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        # Banco guarda UTC sem fuso
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    if end_of_day and len(text) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


def _clean_text(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class ReportFilters:
    keyword: Optional[str] = None
    category_id: Optional[int] = None
    status: Optional[ReportStatus] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    address: Optional[str] = None
    has_image: Optional[bool] = None
    is_anonymous: Optional[bool] = None

    @classmethod
    def from_args(cls, args):
        status = None
        if args.get('status') not in (None, ''):
            try:
                status = ReportStatus.parse(args.get('status'))
            except ValidationFailed:
                status = None

        return cls(
            keyword=_clean_text(args.get('keyword')),
            category_id=parse_int(args.get('categoryId')),
            status=status,
            from_date=parse_datetime(args.get('fromDate')),
            to_date=parse_datetime(args.get('toDate'), end_of_day=True),
            address=_clean_text(args.get('address')),
            has_image=parse_bool(args.get('hasImage')),
            is_anonymous=parse_bool(args.get('isAnonymous')),
        )

    def apply(self, query):
        """Aplica os filtros presentes (AND entre eles)"""
        if self.keyword:
            query = query.filter(or_(
                Report.title.icontains(self.keyword, autoescape=True),
                Report.description.icontains(self.keyword, autoescape=True),
                Report.address.icontains(self.keyword, autoescape=True),
            ))
        if self.category_id is not None:
            query = query.filter(Report.category_id == self.category_id)
        if self.status is not None:
            query = query.filter(Report.status == self.status)
        if self.from_date is not None:
            query = query.filter(Report.created_at >= self.from_date)
        if self.to_date is not None:
            query = query.filter(Report.created_at <= self.to_date)
        if self.address:
            query = query.filter(Report.address.icontains(self.address, autoescape=True))
        if self.has_image is True:
            query = query.filter(and_(Report.image_url.isnot(None), Report.image_url != ''))
        elif self.has_image is False:
            query = query.filter(or_(Report.image_url.is_(None), Report.image_url == ''))
        if self.is_anonymous is True:
            query = query.filter(Report.user_id.is_(None))
        elif self.is_anonymous is False:
            query = query.filter(Report.user_id.isnot(None))
        return query

    def to_dict(self):
        return {
            'keyword': self.keyword,
            'categoryId': self.category_id,
            'status': self.status.name if self.status is not None else None,
            'fromDate': self.from_date.isoformat() if self.from_date else None,
            'toDate': self.to_date.isoformat() if self.to_date else None,
            'address': self.address,
            'hasImage': self.has_image,
            'isAnonymous': self.is_anonymous,
        }


# Chaves de ordenação aceitas -> coluna
SORT_COLUMNS = {
    'created': Report.created_at,
    'title': Report.title,
    'status': Report.status,
    'category': Category.name,
    'address': Report.address,
}
DEFAULT_SORT_KEY = 'created'

SORT_OPTIONS = [
    {'value': 'created', 'name': 'Created Date'},
    {'value': 'title', 'name': 'Title'},
    {'value': 'status', 'name': 'Status'},
    {'value': 'category', 'name': 'Category'},
    {'value': 'address', 'name': 'Address'},
]
SORT_ORDER_OPTIONS = [
    {'value': 'desc', 'name': 'Descending'},
    {'value': 'asc', 'name': 'Ascending'},
]


@dataclass
class SortSpec:
    key: str = DEFAULT_SORT_KEY
    order: str = 'desc'

    @classmethod
    def from_args(cls, args):
        key = (args.get('sortBy') or DEFAULT_SORT_KEY).strip().lower()
        if key not in SORT_COLUMNS:
            key = DEFAULT_SORT_KEY
        order = 'asc' if (args.get('sortOrder') or '').strip().lower() == 'asc' else 'desc'
        return cls(key=key, order=order)

    def apply(self, query):
        column = SORT_COLUMNS.get(self.key, SORT_COLUMNS[DEFAULT_SORT_KEY])
        # id como desempate para a paginação ser determinística
        if self.order == 'asc':
            return query.order_by(column.asc(), Report.id.asc())
        return query.order_by(column.desc(), Report.id.desc())


MAX_OFFSET = 2 ** 62


@dataclass
class PageRequest:
    page: int = 1
    page_size: int = 20

    @classmethod
    def normalize(cls, page=None, page_size=None, default_size=None, max_size=None):
        """page < 1 vira 1; page_size inválido vira o padrão; page_size acima do máximo é cortado"""
        default_size = default_size or current_app.config.get('DEFAULT_PAGE_SIZE', 20)
        max_size = max_size or current_app.config.get('MAX_PAGE_SIZE', 100)

        page = parse_int(page)
        if page is None or page < 1:
            page = 1

        page_size = parse_int(page_size)
        if page_size is None or page_size < 1:
            page_size = default_size
        page_size = min(page_size, max_size)
        # OFFSET precisa caber num inteiro de 64 bits do banco
        page = min(page, MAX_OFFSET // page_size)

        return cls(page=page, page_size=page_size)

    @property
    def offset(self):
        return (self.page - 1) * self.page_size


@dataclass
class SearchResult:
    data: list
    page: PageRequest
    total_count: int
    filters: ReportFilters
    sort: SortSpec = field(default_factory=SortSpec)

    @property
    def total_pages(self):
        return math.ceil(self.total_count / self.page.page_size) if self.total_count else 0

    @property
    def pagination(self):
        return {
            'page': self.page.page,
            'pageSize': self.page.page_size,
            'totalCount': self.total_count,
            'totalPages': self.total_pages,
            'hasNext': self.page.page < self.total_pages,
            'hasPrevious': self.page.page > 1,
        }

    def to_dict(self):
        filters = self.filters.to_dict()
        filters['sortBy'] = self.sort.key
        filters['sortOrder'] = self.sort.order
        return {
            'success': True,
            'data': self.data,
            'pagination': self.pagination,
            'filters': filters,
        }


class ReportQueryService:
    """Consultas somente leitura sobre os relatos"""

    @staticmethod
    @translate_store_errors('Failed to search reports')
    def search(filters=None, sort=None, page=None, now=None):
        filters = filters or ReportFilters()
        sort = sort or SortSpec()
        page = page or PageRequest.normalize()
        now = now or datetime.utcnow()

        query = filters.apply(Report.query.join(Category, Report.category_id == Category.id))
        total_count = query.count()

        rows = sort.apply(query).offset(page.offset).limit(page.page_size).all()

        return SearchResult(
            data=[report.to_dict(now) for report in rows],
            page=page,
            total_count=total_count,
            filters=filters,
            sort=sort,
        )

    @staticmethod
    @translate_store_errors('Failed to load recent activity')
    def recent_activity(limit=20, now=None):
        """Relatos mais recentes primeiro, com limite entre 1 e MAX_PAGE_SIZE"""
        max_size = current_app.config.get('MAX_PAGE_SIZE', 100)
        limit = parse_int(limit)
        if limit is None or limit < 1:
            limit = 20
        limit = min(limit, max_size)
        now = now or datetime.utcnow()

        reports = Report.query.order_by(
            Report.created_at.desc(), Report.id.desc()
        ).limit(limit).all()

        return [{
            'id': r.id,
            'title': r.title,
            'status': r.status.name,
            'address': r.address,
            'categoryName': r.category.name if r.category else None,
            'categoryIcon': r.category.icon if r.category else None,
            'categoryColor': r.category.color if r.category else None,
            'userName': r.user.display_name if r.user is not None else 'Anonymous',
            'isAnonymous': r.is_anonymous,
            'createdAt': r.created_at.isoformat(),
            'hasImage': r.has_image,
            'daysSinceCreated': r.days_since_created(now),
        } for r in reports]

    @staticmethod
    @translate_store_errors('Failed to load reports')
    def for_user(user_id, now=None):
        now = now or datetime.utcnow()
        reports = Report.query.filter(Report.user_id == user_id).order_by(
            Report.created_at.desc(), Report.id.desc()
        ).all()
        return [r.to_dict(now) for r in reports]

    @staticmethod
    @translate_store_errors('Failed to load filter options')
    def filter_options():
        categories = Category.query.order_by(Category.id).all()
        return {
            'categories': [c.to_dict() for c in categories],
            'statusOptions': [{
                'value': int(status),
                'name': status.name,
                'displayName': status.display_name,
            } for status in ReportStatus],
            'sortOptions': SORT_OPTIONS,
            'sortOrderOptions': SORT_ORDER_OPTIONS,
        }
