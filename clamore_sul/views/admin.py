# ==============================================================================
# VISTAS DEL PANEL - Login, dashboard y mutaciones
# ==============================================================================
# Todo el blueprint (salvo el login) pasa por la puerta admin ANTES de cada
# request: sesión vigente + fila user_roles "admin". Si el rol desaparece a
# mitad de sesión, la sesión se cierra y se vuelve al login.
#
# Las mutaciones no aplican nada en memoria: redirigen y el dashboard vuelve
# a leer todo del almacenamiento.
# ==============================================================================

from flask import (
    Blueprint,
    current_app,
    flash,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from clamore_sul.exceptions import AuthError, StoreError, ValidationError
from clamore_sul.models import SaleStatus
from clamore_sul.services.dashboard_service import default_range, parse_date_range
from clamore_sul.views.guards import (
    admin_token,
    deny_admin_access,
    get_services,
    load_admin_session,
    verify_csrf,
)


admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

PUBLIC_ENDPOINTS = ('admin.login',)


@admin_bp.before_request
def require_admin_session():
    if request.endpoint in PUBLIC_ENDPOINTS:
        return None
    if load_admin_session() is None:
        return deny_admin_access()
    return None


@admin_bp.after_request
def add_no_cache_headers(response):
    response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
    response.headers['Pragma'] = 'no-cache'
    return response


# ═══════════════════════════════════════════════════════════════════════════
# AUTENTICACIÓN
# ═══════════════════════════════════════════════════════════════════════════

@admin_bp.route('/login', methods=['GET', 'POST'])
@verify_csrf
def login():
    auth = get_services().auth_service
    if request.method == 'GET':
        if auth.require_admin(session) is not None:
            return redirect(url_for('admin.dashboard'))
        return render_template('admin/login.html')

    email = (request.form.get('email') or '').strip()
    password = request.form.get('password') or ''
    try:
        admin_session = auth.admin_sign_in(session, email, password)
    except AuthError as e:
        flash(str(e), 'danger')
        return redirect(url_for('admin.login'))
    except StoreError as e:
        current_app.logger.error("Falha no login de %s: %s", email, e)
        flash(str(e), 'danger')
        return redirect(url_for('admin.login'))

    # Sesión permanente (usa PERMANENT_SESSION_LIFETIME)
    session.permanent = True
    flash(f'Bem-vindo, {admin_session.email}.', 'success')
    return redirect(url_for('admin.dashboard'))


@admin_bp.route('/logout', methods=['POST'])
@verify_csrf
def logout():
    get_services().auth_service.sign_out(session)
    flash('Sessão encerrada.', 'info')
    return redirect(url_for('admin.login'))


# ═══════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════

def _viewer_key() -> str:
    # Una generación por admin: sus refrescos no pisan los de otro admin
    return g.admin_session.user_id


@admin_bp.route('')
def dashboard():
    services = get_services()
    try:
        date_from, date_to = parse_date_range(request.args.get('de'), request.args.get('ate'))
    except ValidationError as e:
        flash(str(e), 'warning')
        date_from, date_to = default_range()

    dashboard_data = None
    generation = 0
    try:
        dashboard_data, generation, _ = services.dashboard_loader.refresh(
            _viewer_key(), date_from, date_to, token=admin_token()
        )
    except StoreError as e:
        current_app.logger.error("Falha ao carregar o painel: %s", e)
        flash(str(e), 'danger')

    return render_template(
        'admin/dashboard.html',
        dashboard=dashboard_data,
        generation=generation,
        date_from=date_from,
        date_to=date_to,
        sale_statuses=[status.value for status in SaleStatus],
        format_price=services.catalog_service.format_price,
    )


@admin_bp.route('/api/dashboard')
def dashboard_api():
    """Versión JSON del panel. Incluye la generación para descartar respuestas viejas."""
    try:
        date_from, date_to = parse_date_range(request.args.get('de'), request.args.get('ate'))
    except ValidationError as e:
        return jsonify({'ok': False, 'error': str(e)}), 400

    try:
        dashboard_data, generation, current = get_services().dashboard_loader.refresh(
            _viewer_key(), date_from, date_to, token=admin_token()
        )
    except StoreError as e:
        current_app.logger.error("Falha ao carregar o painel: %s", e)
        return jsonify({'ok': False, 'error': str(e)}), 502

    return jsonify({
        'ok': True,
        'generation': generation,
        'current': current,
        'dashboard': dashboard_data.to_dict(),
    })


# ═══════════════════════════════════════════════════════════════════════════
# PRODUCTOS Y VENTAS
# ═══════════════════════════════════════════════════════════════════════════

def _back_to_dashboard():
    return redirect(url_for('admin.dashboard'))


@admin_bp.route('/produtos', methods=['POST'])
@verify_csrf
def create_product():
    try:
        product = get_services().product_service.create_product(request.form, token=admin_token())
        flash(f'Produto "{product.name}" criado.', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return _back_to_dashboard()


@admin_bp.route('/produtos/<product_id>', methods=['POST'])
@verify_csrf
def update_product(product_id):
    try:
        product = get_services().product_service.update_product(
            product_id, request.form, token=admin_token()
        )
        flash(f'Produto "{product.name}" atualizado.', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return _back_to_dashboard()


@admin_bp.route('/produtos/<product_id>/excluir', methods=['POST'])
@verify_csrf
def delete_product(product_id):
    try:
        get_services().product_service.delete_product(product_id, token=admin_token())
        flash('Produto excluído.', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return _back_to_dashboard()


@admin_bp.route('/vendas', methods=['POST'])
@verify_csrf
def create_sale():
    try:
        sale = get_services().sale_service.create_sale(request.form, token=admin_token())
        flash(f'Venda registrada: R$ {sale.total:.2f}.', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return _back_to_dashboard()
