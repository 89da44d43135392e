# ==============================================================================
# GUARDAS DE REQUEST - CSRF, acceso admin y acceso al contenedor
# ==============================================================================
# Compartidas por los blueprints público y admin.
#
# CSRF: token aleatorio por sesión; todo POST debe traerlo en el campo
# csrf_token del formulario o en la cabecera X-CSRF-Token.
# ==============================================================================

import uuid
from functools import wraps

from flask import current_app, flash, g, jsonify, redirect, request, session, url_for


CONTAINER_KEY = 'clamore_container'


def get_services():
    """AppContainer asociado a la app actual."""
    return current_app.extensions[CONTAINER_KEY]


def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


def _wants_json() -> bool:
    return request.path.startswith('/admin/api/') or request.is_json


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method == 'POST':
            token = session.get('csrf_token')
            form_token = (
                request.form.get('csrf_token') or
                request.headers.get('X-CSRF-Token')
            )
            if not form_token and request.is_json:
                json_data = request.get_json(silent=True) or {}
                form_token = json_data.get('csrf_token')

            if not token or not form_token or token != form_token:
                if _wants_json():
                    return jsonify({'ok': False, 'error': 'CSRF token inválido'}), 403
                flash('Sessão expirada. Por favor, tente novamente.', 'warning')
                return redirect(request.referrer or url_for('public.index'))
        return f(*args, **kwargs)
    return wrapper


def load_admin_session():
    """
    Reevalúa sesión + rol admin y deja el resultado en g.admin_session.

    Returns:
        AuthSession vigente o None (la sesión ya fue cerrada si el rol cayó)
    """
    admin_session = get_services().auth_service.require_admin(session)
    g.admin_session = admin_session
    return admin_session


def deny_admin_access():
    """Respuesta para un visitante sin sesión admin válida."""
    if _wants_json():
        return jsonify({'ok': False, 'error': 'Acesso restrito a administradores'}), 401
    flash('Faça login como administrador para continuar.', 'warning')
    return redirect(url_for('admin.login'))


def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if load_admin_session() is None:
            return deny_admin_access()
        return f(*args, **kwargs)
    return wrapper


def admin_token():
    admin_session = getattr(g, 'admin_session', None)
    return admin_session.access_token if admin_session else None
