# app/routes/reports.py
from flask import Blueprint, jsonify, request
from flask_login import current_user
from app.models import AuthenticatedSubmitter, AnonymousSubmitter
from app.services.report_lifecycle import ReportLifecycleService
from app.services.report_query import ReportQueryService, ReportFilters, SortSpec, PageRequest
from app.utils.decorators import api_login_required

bp = Blueprint('reports', __name__, url_prefix='/api/reports')


@bp.route('', methods=['POST'])
def create_report():
    """Envio de relato por cidadão (logado ou anônimo)"""
    data = request.get_json(silent=True) or {}

    if current_user.is_authenticated:
        submitter = AuthenticatedSubmitter(user_id=current_user.id)
    else:
        submitter = AnonymousSubmitter(
            contact_email=(data.get('contactEmail') or '').strip() or None,
            contact_phone=(data.get('contactPhone') or '').strip() or None,
        )

    report = ReportLifecycleService.submit(
        title=data.get('title'),
        description=data.get('description'),
        address=data.get('address'),
        category_id=data.get('categoryId'),
        submitter=submitter,
        image_url=data.get('reportImage'),
    )

    return jsonify({
        'success': True,
        'reportId': report.id,
        'message': 'Report created successfully',
        'data': report.to_dict(),
    }), 201


@bp.route('/<int:report_id>')
def get_report(report_id):
    report = ReportLifecycleService.get(report_id)
    return jsonify({'success': True, 'data': report.to_dict()})


@bp.route('/my')
@api_login_required
def my_reports():
    """Relatos do usuário logado"""
    return jsonify({'success': True, 'reports': ReportQueryService.for_user(current_user.id)})


@bp.route('/search')
def search_reports():
    """Busca com filtros, ordenação e paginação; parâmetros inválidos são normalizados"""
    result = ReportQueryService.search(
        filters=ReportFilters.from_args(request.args),
        sort=SortSpec.from_args(request.args),
        page=PageRequest.normalize(request.args.get('page'), request.args.get('pageSize')),
    )
    return jsonify(result.to_dict())


@bp.route('/filters')
def filter_options():
    options = ReportQueryService.filter_options()
    return jsonify({'success': True, **options})
