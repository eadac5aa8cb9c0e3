# app/routes/auth.py
import logging
from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, current_user
from app import db
from app.models import User
from app.utils.decorators import api_login_required
from app.utils.errors import error_envelope

bp = Blueprint('auth', __name__, url_prefix='/api/auth')
logger = logging.getLogger(__name__)

# Rotas que um usuário bloqueado ainda pode chamar
BLOCKED_ALLOWED_PREFIXES = ('/api/auth/login', '/api/auth/logout')


@bp.before_app_request
def refuse_blocked_users():
    """Recusa qualquer requisição de uma sessão cujo usuário foi bloqueado"""
    if not current_user.is_authenticated or not current_user.is_blocked:
        return None
    if request.path.startswith(BLOCKED_ALLOWED_PREFIXES):
        return None
    logger.warning(f"Usuário bloqueado {current_user.id} tentou acessar {request.path}")
    return error_envelope('Your account has been blocked. Please contact support.', 403,
                          error='ACCOUNT_BLOCKED')


@bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        logger.info(f"Login falhou para {email}")
        return error_envelope('Invalid email or password', 401)

    if user.is_blocked:
        logger.warning(f"Usuário bloqueado {user.id} tentou fazer login")
        return error_envelope('Your account has been blocked. Please contact support.', 403,
                              error='ACCOUNT_BLOCKED')

    login_user(user, remember=True)
    user.update_last_login()
    db.session.commit()

    return jsonify({'success': True, 'data': user.to_dict()})


@bp.route('/logout', methods=['POST'])
@api_login_required
def logout():
    logout_user()
    return jsonify({'success': True, 'message': 'Logged out'})


@bp.route('/me')
@api_login_required
def me():
    return jsonify({'success': True, 'data': current_user.to_dict()})
