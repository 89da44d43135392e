# ==============================================================================
# VISTAS PÚBLICAS - Inicio y catálogo
# ==============================================================================
# Cada GET de página pública registra una visita (best effort) y asegura la
# cookie visitor_id, independiente de la sesión de login.
# ==============================================================================

from flask import (
    Blueprint,
    current_app,
    flash,
    make_response,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from clamore_sul.content import home_sections
from clamore_sul.exceptions import StoreError, ValidationError
from clamore_sul.services.visit_service import VISITOR_KEY
from clamore_sul.views.guards import admin_required, admin_token, get_services, verify_csrf


public_bp = Blueprint('public', __name__)

# Dos años: el identificador sobrevive mientras el navegador no lo borre
VISITOR_COOKIE_MAX_AGE = 2 * 365 * 24 * 3600


def _tracked(html: str):
    """Envuelve la respuesta registrando la visita y fijando la cookie."""
    response = make_response(html)
    cookies = dict(request.cookies)
    services = get_services()
    visitor_id = services.visit_service.ensure_visitor_id(cookies)
    if request.cookies.get(VISITOR_KEY) != visitor_id:
        response.set_cookie(
            VISITOR_KEY,
            visitor_id,
            max_age=VISITOR_COOKIE_MAX_AGE,
            samesite='Lax',
            secure=current_app.config.get('SESSION_COOKIE_SECURE', False),
        )
    services.visit_service.record_visit(
        visitor_id,
        page=request.path,
        referrer=request.referrer,
        user_agent=request.user_agent.string,
    )
    return response


def _viewer_is_admin() -> bool:
    auth = get_services().auth_service
    current = auth.get_session(session)
    return bool(current and auth.is_admin(current.user_id, current.access_token))


@public_bp.route('/')
def index():
    return _tracked(render_template('index.html', **home_sections()))


@public_bp.route('/catalogo')
def catalog():
    catalog_service = get_services().catalog_service
    data = catalog_service.load_catalog()

    active_category = request.args.get('categoria') or None
    search_text = (request.args.get('q') or '').strip()
    filtered = catalog_service.filter_products(data.products, active_category, search_text)

    items = [
        {
            'product': product,
            'category_label': catalog_service.category_label(product, data.categories),
            'price_label': catalog_service.format_price(product.price),
            'whatsapp_url': catalog_service.whatsapp_link(product),
        }
        for product in filtered
    ]
    html = render_template(
        'catalog.html',
        catalog=data,
        items=items,
        active_category=active_category,
        search_text=search_text,
        empty_message=catalog_service.empty_message(data.products, filtered),
        is_admin=_viewer_is_admin(),
        # Las categorías de demostración no existen en la tabla: no se ofrecen al alta
        form_categories=[] if data.categories_from_fallback else data.categories,
    )
    return _tracked(html)


@public_bp.route('/catalogo/produtos', methods=['POST'])
@verify_csrf
@admin_required
def catalog_add_product():
    """Alta rápida desde la vitrina: el producto siempre nace activo."""
    fields = request.form.to_dict()
    fields['is_active'] = 'true'
    try:
        product = get_services().product_service.create_product(fields, token=admin_token())
        flash(f'Produto "{product.name}" adicionado.', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return redirect(url_for('public.catalog'))
