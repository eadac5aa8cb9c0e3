# app/routes/dashboard.py
from flask import Blueprint, jsonify, request
from app.services.dashboard_stats import DashboardService
from app.services.report_lifecycle import ReportLifecycleService
from app.services.report_query import ReportQueryService
from app.utils.decorators import staff_required

bp = Blueprint('dashboard', __name__, url_prefix='/api/dashboard')


@bp.route('/overview')
@staff_required
def overview():
    """Totais por status, semana, mês e taxa de conclusão"""
    return jsonify({'success': True, 'data': DashboardService.overview()})


@bp.route('/category-stats')
@staff_required
def category_stats():
    return jsonify({'success': True, 'data': DashboardService.category_breakdown()})


@bp.route('/monthly-trends')
@staff_required
def monthly_trends():
    months = request.args.get('months', 12)
    return jsonify({'success': True, 'data': DashboardService.monthly_trends(months)})


@bp.route('/recent-activity')
@staff_required
def recent_activity():
    limit = request.args.get('limit', 20)
    return jsonify({'success': True, 'data': ReportQueryService.recent_activity(limit)})


@bp.route('/performance-metrics')
@staff_required
def performance_metrics():
    return jsonify({'success': True, 'data': DashboardService.performance_metrics()})


@bp.route('/reports/<int:report_id>/status', methods=['PUT'])
@staff_required
def update_report_status(report_id):
    """Mudar status de um relato (404 se não existe, 400 se inválido ou falha ao salvar)"""
    data = request.get_json(silent=True) or {}

    report = ReportLifecycleService.change_status(
        report_id,
        data.get('status'),
        admin_notes=data.get('adminNotes'),
    )

    return jsonify({
        'success': True,
        'message': 'Report status updated successfully',
        'data': report.to_dict(),
    })
