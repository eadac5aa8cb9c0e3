from functools import wraps
from flask_login import current_user
from app.utils.errors import error_envelope


def staff_required(f):
    """Restringe a rota a funcionários da prefeitura (staff ou admin)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return error_envelope('Authentication required', 401)

        if current_user.is_blocked:
            return error_envelope('Your account has been blocked. Please contact support.', 403,
                                  error='ACCOUNT_BLOCKED')

        if not current_user.is_staff:
            return error_envelope('You are not authorized to perform this action', 403)

        return f(*args, **kwargs)
    return decorated_function


def api_login_required(f):
    """login_required que responde JSON em vez de redirecionar"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return error_envelope('Authentication required', 401)

        if current_user.is_blocked:
            return error_envelope('Your account has been blocked. Please contact support.', 403,
                                  error='ACCOUNT_BLOCKED')

        return f(*args, **kwargs)
    return decorated_function
