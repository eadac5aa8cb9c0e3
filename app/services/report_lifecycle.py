# app/services/report_lifecycle.py
"""
Ciclo de vida dos relatos: envio e mudança de status

O grafo de status é completo (qualquer status -> qualquer status), então
a única regra condicional é a derivação de resolved_at.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import Report, ReportStatus, Category, RESOLVED_STATUSES
from app.models.report import AuthenticatedSubmitter, AnonymousSubmitter
from app.utils.errors import NotFound, ValidationFailed, PersistenceFailed, translate_store_errors

logger = logging.getLogger(__name__)


def derive_resolved_at(new_status, current_resolved_at, now):
    """
    Calcula o novo resolved_at após uma mudança de status

    - Entrando em Resolved/Closed sem data: carimba com now
    - Entrando em Resolved/Closed já com data: mantém a data original
    - Qualquer outro status: limpa
    """
    if new_status in RESOLVED_STATUSES:
        return current_resolved_at if current_resolved_at is not None else now
    return None


class ReportLifecycleService:
    """Operações que alteram relatos"""

    @staticmethod
    @translate_store_errors('Failed to load report')
    def get(report_id):
        report = db.session.get(Report, report_id)
        if report is None:
            raise NotFound()
        return report

    @staticmethod
    def submit(title, description, address, category_id, submitter=None, image_url=None):
        """
        Registra um novo relato com status Submitted

        Args:
            submitter: AuthenticatedSubmitter ou AnonymousSubmitter (None = anônimo sem contato)

        Returns:
            Report: relato criado
        """
        title = (title or '').strip()
        description = (description or '').strip()
        address = (address or '').strip()

        missing = [name for name, value in (
            ('title', title), ('description', description), ('address', address)
        ) if not value]
        if missing:
            raise ValidationFailed(f"Required fields missing: {', '.join(missing)}")

        try:
            category_id = int(category_id)
        except (TypeError, ValueError):
            raise ValidationFailed('Invalid category ID')
        if db.session.get(Category, category_id) is None:
            raise ValidationFailed('Invalid category ID')

        if submitter is None:
            submitter = AnonymousSubmitter()
        if not isinstance(submitter, (AuthenticatedSubmitter, AnonymousSubmitter)):
            raise ValidationFailed('Submitter must be authenticated or anonymous')

        now = datetime.utcnow()
        report = Report(
            title=title,
            description=description,
            address=address,
            category_id=category_id,
            image_url=(image_url or '').strip() or None,
            status=ReportStatus.Submitted,
            created_at=now,
            updated_at=now,
        )
        report.submitter = submitter

        db.session.add(report)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceFailed('Failed to create report', detail=str(e))

        logger.info(f"Relato {report.id} criado (anônimo={report.is_anonymous}, categoria={category_id})")
        return report

    @staticmethod
    def change_status(report_id, new_status, admin_notes=None):
        """
        Muda o status de um relato

        Args:
            report_id: ID do relato
            new_status: ReportStatus, inteiro ou nome do status
            admin_notes: sobrescreve as notas se não for vazio; vazio/None mantém as atuais

        Returns:
            Report: relato atualizado

        Raises:
            ValidationFailed: status desconhecido
            NotFound: relato não existe (nenhuma escrita é feita)
            PersistenceFailed: erro ao salvar, inclusive conflito de versão
        """
        status = ReportStatus.parse(new_status)

        try:
            report = db.session.get(Report, report_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Falha ao carregar relato {report_id}: {e}")
            raise PersistenceFailed('Failed to update report status', detail=str(e))
        if report is None:
            logger.warning(f"Mudança de status para relato inexistente: {report_id}")
            raise NotFound()

        previous = report.status
        now = datetime.utcnow()

        report.status = status
        report.updated_at = now
        report.resolved_at = derive_resolved_at(status, report.resolved_at, now)

        if admin_notes:
            report.admin_notes = admin_notes

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Falha ao salvar status do relato {report_id}: {e}")
            raise PersistenceFailed('Failed to update report status', detail=str(e))

        logger.info(f"Relato {report.id}: {previous.name} -> {status.name}")
        return report
