# tests/test_dashboard_stats.py
"""
Testes das agregações do dashboard
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from app.models import ReportStatus
from app.services.dashboard_stats import (
    DashboardService, start_of_week, parse_week_start, shift_month, percentage, SUNDAY,
)
from app.utils.errors import PersistenceFailed


class TestHelpers:
    """Funções auxiliares de data e percentual"""

    def test_start_of_week_sunday(self):
        wednesday = datetime(2025, 6, 18, 15, 30)
        assert start_of_week(wednesday, SUNDAY) == datetime(2025, 6, 15)

    def test_start_of_week_monday(self):
        wednesday = datetime(2025, 6, 18, 15, 30)
        assert start_of_week(wednesday, 0) == datetime(2025, 6, 16)

    def test_start_of_week_on_first_day(self):
        sunday = datetime(2025, 6, 15, 0, 5)
        assert start_of_week(sunday, SUNDAY) == datetime(2025, 6, 15)

    @pytest.mark.parametrize('raw, expected', [
        ('sunday', 6), ('Monday', 0), ('sat', 5), (2, 2), ('6', 6), ('domingo', 6), (None, 6),
    ])
    def test_parse_week_start(self, raw, expected):
        assert parse_week_start(raw) == expected

    @pytest.mark.parametrize('year, month, delta, expected', [
        (2025, 6, -5, (2025, 1)),
        (2025, 2, -3, (2024, 11)),
        (2024, 12, 1, (2025, 1)),
        (2025, 1, -12, (2024, 1)),
    ])
    def test_shift_month(self, year, month, delta, expected):
        assert shift_month(year, month, delta) == expected

    def test_percentage(self):
        assert percentage(0, 0) == 0
        assert percentage(2, 4) == 50.0
        assert percentage(1, 3) == 33.3


class TestOverview:
    """Testes de DashboardService.overview"""

    def test_empty(self, app_context, categories):
        data = DashboardService.overview()
        assert data['totalReports'] == 0
        assert data['completionRate'] == 0
        assert data['statusBreakdown'] == {
            'submitted': 0, 'inReview': 0, 'inProgress': 0, 'resolved': 0, 'closed': 0,
        }

    def test_completion_rate(self, app_context, make_report):
        make_report(status=ReportStatus.Submitted)
        make_report(status=ReportStatus.InProgress)
        make_report(status=ReportStatus.Resolved, resolved_at=datetime.utcnow())
        make_report(status=ReportStatus.Closed, resolved_at=datetime.utcnow())

        data = DashboardService.overview()
        assert data['totalReports'] == 4
        assert data['completionRate'] == 50.0
        assert data['statusBreakdown']['resolved'] == 1
        assert data['statusBreakdown']['closed'] == 1
        assert data['statusBreakdown']['inProgress'] == 1

    def test_week_and_month_windows(self, app_context, make_report):
        now = datetime(2025, 6, 18, 15, 0)  # quarta-feira
        make_report(created_at=datetime(2025, 6, 15, 10, 0))  # domingo
        make_report(created_at=datetime(2025, 6, 17, 9, 0))  # terça
        make_report(created_at=datetime(2025, 6, 2, 9, 0))
        make_report(created_at=datetime(2025, 5, 30, 9, 0))

        sunday = DashboardService.overview(now=now, week_start='sunday')
        assert sunday['thisWeekReports'] == 2
        assert sunday['thisMonthReports'] == 3
        assert sunday['weekStartsOn'] == 'sunday'

        monday = DashboardService.overview(now=now, week_start='monday')
        assert monday['thisWeekReports'] == 1

    def test_week_start_from_config(self, app, app_context, make_report):
        app.config['WEEK_START'] = 'monday'
        assert DashboardService.overview()['weekStartsOn'] == 'monday'


class TestCategoryBreakdown:
    """Testes de DashboardService.category_breakdown"""

    def test_grouped_and_ordered(self, app_context, make_report):
        make_report(category='Trash', status=ReportStatus.Resolved)
        make_report(category='Trash', status=ReportStatus.Submitted)
        make_report(category='Trash', status=ReportStatus.Closed)
        make_report(category='Pothole', status=ReportStatus.InReview)

        data = DashboardService.category_breakdown()
        assert [row['categoryName'] for row in data] == ['Trash', 'Pothole']
        trash = data[0]
        assert trash['count'] == 3
        assert trash['resolved'] == 2
        assert trash['pending'] == 1
        assert trash['categoryIcon'] == 'trash'
        assert trash['categoryColor'] == '#96CEB4'
        assert data[1]['resolved'] == 0
        assert data[1]['pending'] == 1

    def test_empty(self, app_context, categories):
        assert DashboardService.category_breakdown() == []


class TestMonthlyTrends:
    """Testes de DashboardService.monthly_trends"""

    def test_current_month_only(self, app_context, make_report):
        make_report()
        make_report(status=ReportStatus.Resolved)

        data = DashboardService.monthly_trends(6)
        assert len(data) == 6
        assert [b['total'] for b in data].count(0) == 5
        current = data[-1]
        now = datetime.utcnow()
        assert (current['year'], current['month']) == (now.year, now.month)
        assert current['total'] == 2
        assert current['resolved'] == 1
        assert current['pending'] == 1

    def test_buckets_cross_year_in_order(self, app_context, make_report):
        now = datetime(2025, 2, 10, 12, 0)
        make_report(created_at=datetime(2024, 12, 5))
        make_report(created_at=datetime(2024, 12, 20), status=ReportStatus.Closed)
        make_report(created_at=datetime(2024, 10, 1))  # fora da janela

        data = DashboardService.monthly_trends(4, now=now)
        assert [(b['year'], b['month']) for b in data] == [(2024, 11), (2024, 12), (2025, 1), (2025, 2)]
        assert [b['total'] for b in data] == [0, 2, 0, 0]
        assert data[1]['resolved'] == 1
        assert data[1]['monthName'] == 'Dec 2024'

    @pytest.mark.parametrize('months, expected', [(0, 1), (-3, 1), ('abc', 12), (500, 60)])
    def test_months_normalized(self, app_context, categories, months, expected):
        assert len(DashboardService.monthly_trends(months)) == expected


class TestPerformanceMetrics:
    """Testes de DashboardService.performance_metrics"""

    def test_empty(self, app_context, categories):
        data = DashboardService.performance_metrics()
        assert data == {
            'averageResolutionDays': 0, 'totalReports': 0, 'resolvedReports': 0,
            'quickResolutions': 0, 'overdueReports': 0, 'resolutionRate': 0,
        }

    def test_overdue(self, app_context, make_report, days_ago):
        make_report(created_at=days_ago(31), status=ReportStatus.InReview)
        make_report(created_at=days_ago(29), status=ReportStatus.InReview)
        make_report(created_at=days_ago(31), status=ReportStatus.Resolved, resolved_at=days_ago(1))

        assert DashboardService.performance_metrics()['overdueReports'] == 1

    def test_resolution_times(self, app_context, make_report):
        created = datetime(2025, 3, 1, 9, 0)
        make_report(created_at=created, status=ReportStatus.Resolved,
                    resolved_at=created + timedelta(days=2, hours=5))
        make_report(created_at=created, status=ReportStatus.Closed,
                    resolved_at=created + timedelta(days=7, hours=1))
        make_report(created_at=created, status=ReportStatus.Closed,
                    resolved_at=created + timedelta(days=12))
        make_report(created_at=created, status=ReportStatus.InProgress)

        data = DashboardService.performance_metrics(now=datetime(2025, 3, 20))
        assert data['averageResolutionDays'] == 7.0  # (2 + 7 + 12) / 3
        assert data['quickResolutions'] == 2
        assert data['resolvedReports'] == 3
        assert data['totalReports'] == 4
        assert data['resolutionRate'] == 75.0
        assert data['overdueReports'] == 0

    def test_thresholds_from_config(self, app, app_context, make_report, days_ago):
        app.config['OVERDUE_DAYS'] = 10
        make_report(created_at=days_ago(11))
        assert DashboardService.performance_metrics()['overdueReports'] == 1


class TestStoreErrors:
    """Falhas do banco durante as agregações"""

    def test_overview_failure_is_persistence_failed(self, app_context, categories):
        error = OperationalError('SELECT reports', {}, Exception('database is locked'))
        with patch('app.services.dashboard_stats.db.session.query', side_effect=error):
            with pytest.raises(PersistenceFailed) as exc:
                DashboardService.overview()
        assert exc.value.message == 'Failed to load dashboard overview'

    def test_category_breakdown_failure_is_persistence_failed(self, app_context, categories):
        error = OperationalError('SELECT reports', {}, Exception('database is locked'))
        with patch('app.services.dashboard_stats.db.session.query', side_effect=error):
            with pytest.raises(PersistenceFailed):
                DashboardService.category_breakdown()
