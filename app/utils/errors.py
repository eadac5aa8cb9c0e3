# app/utils/errors.py
"""
Erros do domínio de relatos e tradução para o envelope JSON da API

Toda resposta de erro segue o formato {success: false, message: ...}.
Detalhes internos (mensagem da exceção original) só são expostos quando
SHOW_ERROR_DETAILS está ligado, ou seja, em ambiente de desenvolvimento.
"""
import logging
from datetime import datetime
from functools import wraps
from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ReportsError(Exception):
    """Erro base do domínio"""
    status_code = 400
    message = 'An error occurred while processing your request'

    def __init__(self, message=None, detail=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.detail = detail


class NotFound(ReportsError):
    """Entidade referenciada não existe"""
    status_code = 404
    message = 'Report not found'


class ValidationFailed(ReportsError):
    """Entrada malformada (ex: status desconhecido)"""
    status_code = 400
    message = 'Invalid input'


class PersistenceFailed(ReportsError):
    """Erro opaco do banco de dados; detail nunca vai para o usuário em produção"""
    status_code = 400
    message = 'Failed to save changes'


def translate_store_errors(message):
    """Converte falhas do banco (SQLAlchemyError) em PersistenceFailed"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except SQLAlchemyError as e:
                from app import db
                db.session.rollback()
                raise PersistenceFailed(message, detail=str(e)) from e
        return decorated_function
    return decorator


def error_envelope(message, status_code, detail=None, error=None):
    body = {
        'success': False,
        'message': message,
        'statusCode': status_code,
        'timestamp': datetime.utcnow().isoformat(),
    }
    if error:
        body['error'] = error
    if detail and current_app.config.get('SHOW_ERROR_DETAILS'):
        body['details'] = detail
    return jsonify(body), status_code


def register_error_handlers(app):
    """Registra os handlers globais de erro na aplicação"""

    @app.errorhandler(ReportsError)
    def handle_reports_error(e):
        if isinstance(e, PersistenceFailed):
            logger.error(f"Erro de persistência: {e.detail}")
        return error_envelope(e.message, e.status_code, detail=e.detail)

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(e):
        from app import db
        db.session.rollback()
        logger.error(f"Erro de banco não traduzido: {e}")
        return error_envelope('A database error occurred', PersistenceFailed.status_code, detail=str(e))

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return error_envelope(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception(f"Erro não tratado: {e}")
        return error_envelope('An internal server error occurred', 500, detail=str(e))
