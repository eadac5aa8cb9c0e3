# app/services/dashboard_stats.py
"""
Estatísticas agregadas para o dashboard da prefeitura

Buckets:
    resolvidos = Resolved + Closed
    pendentes  = Submitted + InReview + InProgress

Todas as datas são UTC sem fuso (datetime.utcnow), como no resto da aplicação.
"""
import logging
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import func, case, extract

from app import db
from app.models import Report, ReportStatus, Category, RESOLVED_STATUSES, PENDING_STATUSES
from app.utils.errors import translate_store_errors

logger = logging.getLogger(__name__)

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']
SUNDAY = 6

MAX_TREND_MONTHS = 60


def parse_week_start(value):
    """
    Converte o dia de início da semana para o índice de datetime.weekday()
    (segunda = 0 ... domingo = 6). Aceita nome em inglês ou o índice.
    """
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
        return value
    text = str(value or '').strip().lower()
    if text.isdigit() and 0 <= int(text) <= 6:
        return int(text)
    for index, name in enumerate(WEEKDAYS):
        if text == name or (len(text) >= 3 and name.startswith(text)):
            return index
    logger.warning(f"WEEK_START inválido ({value!r}), usando domingo")
    return SUNDAY


def start_of_week(now, week_start=SUNDAY):
    """Meia-noite do primeiro dia da semana corrente"""
    days_back = (now.weekday() - week_start) % 7
    midnight = datetime(now.year, now.month, now.day)
    return midnight - timedelta(days=days_back)


def start_of_month(now):
    return datetime(now.year, now.month, 1)


def shift_month(year, month, delta):
    """Soma delta meses a (ano, mês)"""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def percentage(part, total):
    """Percentual com 1 casa decimal; 0 quando não há total"""
    if not total:
        return 0
    return round(part / total * 100, 1)


def _resolved_count_expr():
    return func.sum(case((Report.status.in_(list(RESOLVED_STATUSES)), 1), else_=0))


class DashboardService:
    """Agregações somente leitura sobre os relatos"""

    @staticmethod
    @translate_store_errors('Failed to load dashboard overview')
    def overview(now=None, week_start=None):
        now = now or datetime.utcnow()
        if week_start is None:
            week_start = current_app.config.get('WEEK_START', 'sunday')
        week_start = parse_week_start(week_start)

        counts = {status: 0 for status in ReportStatus}
        rows = db.session.query(Report.status, func.count(Report.id)).group_by(Report.status).all()
        for status, count in rows:
            counts[ReportStatus(status)] = count

        total = sum(counts.values())
        resolved = counts[ReportStatus.Resolved] + counts[ReportStatus.Closed]

        this_week = Report.query.filter(Report.created_at >= start_of_week(now, week_start)).count()
        this_month = Report.query.filter(Report.created_at >= start_of_month(now)).count()

        return {
            'totalReports': total,
            'statusBreakdown': {
                'submitted': counts[ReportStatus.Submitted],
                'inReview': counts[ReportStatus.InReview],
                'inProgress': counts[ReportStatus.InProgress],
                'resolved': counts[ReportStatus.Resolved],
                'closed': counts[ReportStatus.Closed],
            },
            'thisWeekReports': this_week,
            'thisMonthReports': this_month,
            'weekStartsOn': WEEKDAYS[week_start],
            'completionRate': percentage(resolved, total),
        }

    @staticmethod
    @translate_store_errors('Failed to load category statistics')
    def category_breakdown():
        total = func.count(Report.id)
        resolved = _resolved_count_expr()

        rows = db.session.query(
            Category.id, Category.name, Category.icon, Category.color,
            total.label('total'), resolved.label('resolved')
        ).join(
            Report, Report.category_id == Category.id
        ).group_by(
            Category.id, Category.name, Category.icon, Category.color
        ).order_by(
            total.desc(), Category.name.asc()
        ).all()

        return [{
            'categoryId': row.id,
            'categoryName': row.name,
            'categoryIcon': row.icon,
            'categoryColor': row.color,
            'count': row.total,
            'resolved': int(row.resolved or 0),
            'pending': row.total - int(row.resolved or 0),
        } for row in rows]

    @staticmethod
    @translate_store_errors('Failed to load monthly trends')
    def monthly_trends(months=12, now=None):
        """
        Um bucket por mês, do mais antigo para o atual, incluindo meses sem relatos

        Args:
            months: quantidade de meses (normalizado para 1..60)
        """
        now = now or datetime.utcnow()
        try:
            months = int(months)
        except (TypeError, ValueError):
            months = 12
        months = max(1, min(months, MAX_TREND_MONTHS))

        first_year, first_month = shift_month(now.year, now.month, -(months - 1))
        start_date = datetime(first_year, first_month, 1)

        year_col = extract('year', Report.created_at)
        month_col = extract('month', Report.created_at)

        rows = db.session.query(
            year_col.label('year'),
            month_col.label('month'),
            func.count(Report.id).label('total'),
            _resolved_count_expr().label('resolved'),
        ).filter(
            Report.created_at >= start_date
        ).group_by(year_col, month_col).all()

        by_month = {(int(row.year), int(row.month)): row for row in rows}

        # Preencher meses sem dados com zero
        result = []
        for i in range(months - 1, -1, -1):
            year, month = shift_month(now.year, now.month, -i)
            row = by_month.get((year, month))
            total = row.total if row else 0
            resolved = int(row.resolved or 0) if row else 0
            result.append({
                'year': year,
                'month': month,
                'monthName': datetime(year, month, 1).strftime('%b %Y'),
                'total': total,
                'resolved': resolved,
                'pending': total - resolved,
            })
        return result

    @staticmethod
    @translate_store_errors('Failed to load performance metrics')
    def performance_metrics(now=None):
        now = now or datetime.utcnow()
        overdue_days = current_app.config.get('OVERDUE_DAYS', 30)
        quick_days = current_app.config.get('QUICK_RESOLUTION_DAYS', 7)

        total = Report.query.count()
        if total == 0:
            return {
                'averageResolutionDays': 0,
                'totalReports': 0,
                'resolvedReports': 0,
                'quickResolutions': 0,
                'overdueReports': 0,
                'resolutionRate': 0,
            }

        resolved_rows = db.session.query(
            Report.created_at, Report.resolved_at
        ).filter(Report.resolved_at.isnot(None)).all()

        # Dias inteiros entre criação e resolução
        resolution_days = [(row.resolved_at - row.created_at).days for row in resolved_rows]
        average = round(sum(resolution_days) / len(resolution_days), 1) if resolution_days else 0
        quick = sum(1 for days in resolution_days if days <= quick_days)

        overdue = Report.query.filter(
            Report.created_at < now - timedelta(days=overdue_days),
            Report.status.in_(list(PENDING_STATUSES))
        ).count()

        return {
            'averageResolutionDays': average,
            'totalReports': total,
            'resolvedReports': len(resolution_days),
            'quickResolutions': quick,
            'overdueReports': overdue,
            'resolutionRate': percentage(len(resolution_days), total),
        }
