import json
import re

from clamore_sul.models import ADMIN_ROLE
from clamore_sul.services.auth_service import SESSION_KEY


# Mismos usuarios que crean las fixtures admin_user / plain_user
ADMIN_EMAIL = 'admin@clamoresul.com.br'
USER_EMAIL = 'cliente@exemplo.com'
USER_PASSWORD = 'segredo-cliente'


def _text(response):
    return response.get_data(as_text=True)


def extract_csrf(html):
    m = re.search(r'name="csrf_token" value="([0-9a-f]+)"', html)
    assert m, 'no csrf token in page'
    return m.group(1)


# ==============================================================================
# PÁGINAS PÚBLICAS
# ==============================================================================

def test_home_renders_sections(client):
    response = client.get('/')
    assert response.status_code == 200
    html = _text(response)
    assert 'Clamore Sul' in html
    assert 'wa.me/' in html


def test_catalog_shows_demo_products_when_store_is_empty(client):
    html = _text(client.get('/catalogo'))
    assert 'Kit Reconstrução Prime' in html
    assert 'R$ 189.90' in html


def test_catalog_filters_by_text_and_category(client, store):
    cat = store.insert('categories', {'name': 'Coloração', 'slug': 'coloracao', 'sort_order': 1})
    store.insert('products', {'name': 'Tinta Castanho', 'category_id': cat['id'], 'is_active': True})
    store.insert('products', {'name': 'Escova Térmica', 'is_active': True})

    html = _text(client.get('/catalogo?q=TINTA'))
    assert 'Tinta Castanho' in html and 'Escova Térmica' not in html

    html = _text(client.get(f"/catalogo?categoria={cat['id']}"))
    assert 'Tinta Castanho' in html and 'Escova Térmica' not in html

    html = _text(client.get('/catalogo?q=inexistente'))
    assert 'Nenhum produto encontrado.' in html


def test_unknown_page_is_404(client):
    assert client.get('/nao-existe').status_code == 404


def test_security_headers(client):
    response = client.get('/')
    assert response.headers['X-Frame-Options'] == 'DENY'
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert 'Strict-Transport-Security' not in response.headers


# ==============================================================================
# LOGIN Y PUERTA ADMIN
# ==============================================================================

def test_dashboard_requires_login(client):
    response = client.get('/admin')
    assert response.status_code == 302
    assert '/admin/login' in response.headers['Location']


def test_api_without_session_returns_json_401(client):
    response = client.get('/admin/api/dashboard')
    assert response.status_code == 401
    assert response.get_json()['ok'] is False


def test_admin_login_reaches_dashboard(client, admin_user, login):
    login()
    response = client.get('/admin')
    assert response.status_code == 200
    html = _text(response)
    assert f'Bem-vindo, {ADMIN_EMAIL}.' in html
    assert 'data-stat="total_visits"' in html
    assert response.headers['Cache-Control'] == 'no-cache, no-store, must-revalidate'


def test_login_with_wrong_password_shows_generic_error(client, admin_user, login):
    login(password='errada')
    with client.session_transaction() as sess:
        assert SESSION_KEY not in sess
    html = _text(client.get('/admin/login'))
    assert 'Email ou senha inválidos.' in html


def test_non_admin_is_signed_out_and_told(client, plain_user, login):
    login(USER_EMAIL, USER_PASSWORD)
    with client.session_transaction() as sess:
        assert SESSION_KEY not in sess
    html = _text(client.get('/admin/login'))
    assert 'Você não tem permissão de administrador.' in html
    assert client.get('/admin').status_code == 302


def test_login_post_without_csrf_is_rejected(client, admin_user):
    client.get('/admin/login')
    client.post('/admin/login', data={'email': ADMIN_EMAIL, 'password': 'segredo-admin'})
    with client.session_transaction() as sess:
        assert SESSION_KEY not in sess


def test_revoked_role_closes_session_on_next_request(client, services, admin_user, login):
    login()
    for row in services.store.select('user_roles', filters={'user_id': admin_user.id}):
        services.store.delete('user_roles', row['id'])

    response = client.get('/admin')
    assert response.status_code == 302
    with client.session_transaction() as sess:
        assert SESSION_KEY not in sess


def test_logout(client, admin_user, login):
    token = login()
    response = client.post('/admin/logout', data={'csrf_token': token})
    assert response.status_code == 302
    assert client.get('/admin').status_code == 302


# ==============================================================================
# PANEL
# ==============================================================================

def test_dashboard_api_reports_generation(client, store, admin_user, login):
    login()
    store.insert('sales', {'quantity': 2, 'unit_price': '10.00', 'total': '20.00'})

    first = client.get('/admin/api/dashboard').get_json()
    second = client.get('/admin/api/dashboard').get_json()

    assert first['ok'] and second['ok']
    assert second['generation'] == first['generation'] + 1
    assert second['current'] is True
    assert second['dashboard']['stats']['total_sales'] == 1
    assert second['dashboard']['stats']['total_revenue'] == '20.00'
    assert second['dashboard']['uncategorized_revenue'] == '20.00'


def test_dashboard_api_carries_every_range_table(client, store, admin_user, login):
    login()
    cat = store.insert('categories', {'name': 'Coloração', 'slug': 'coloracao', 'sort_order': 1})
    product = store.insert('products', {'name': 'Tinta', 'category_id': cat['id'], 'is_active': True})
    store.insert('sales', {'customer_name': 'Ana', 'product_id': product['id'],
                           'quantity': 1, 'unit_price': '30.00', 'total': '30.00'})

    dashboard = client.get('/admin/api/dashboard').get_json()['dashboard']

    assert [s['customer_name'] for s in dashboard['sales']] == ['Ana']
    assert dashboard['sales'][0]['total'] == '30.00'
    assert '30.00' in [p['value'] for p in dashboard['revenue_by_day']]
    assert dashboard['category_revenue'][0]['name'] == 'Coloração'
    assert 'visits_by_day' in dashboard


def test_dashboard_script_rebuilds_tables(client, admin_user, login):
    login()
    html = _text(client.get('/admin'))
    for table_id in ('visits-by-day', 'revenue-by-day', 'category-revenue', 'sales'):
        assert f"fillTable('{table_id}'" in html


def test_dashboard_api_rejects_bad_range(client, admin_user, login):
    login()
    response = client.get('/admin/api/dashboard?de=2025-02-01&ate=2025-01-01')
    assert response.status_code == 400
    assert response.get_json()['ok'] is False


def test_dashboard_with_invalid_date_falls_back_to_default(client, admin_user, login):
    login()
    response = client.get('/admin?de=ontem')
    assert response.status_code == 200
    assert 'Data inválida' in _text(response)


# ==============================================================================
# MUTACIONES
# ==============================================================================

def test_register_sale_persists_exact_total(client, store, admin_user, login):
    token = login()
    response = client.post('/admin/vendas', data={
        'csrf_token': token,
        'quantity': '3',
        'unit_price': '10,50',
    })
    assert response.status_code == 302
    rows = store.select('sales')
    assert rows[0]['total'] == '31.50'
    assert 'Venda registrada: R$ 31.50.' in _text(client.get('/admin'))


def test_invalid_sale_flashes_error(client, store, admin_user, login):
    token = login()
    client.post('/admin/vendas', data={'csrf_token': token, 'quantity': '0', 'unit_price': '5'})
    assert store.select('sales') == []
    assert 'A quantidade deve ser maior que zero.' in _text(client.get('/admin'))


def test_product_create_update_delete(client, store, admin_user, login):
    token = login()
    client.post('/admin/produtos', data={'csrf_token': token, 'name': 'Sérum', 'price': '59,90'})
    product = store.select('products')[0]
    assert product['price'] == '59.90'
    assert product['is_active'] is True

    client.post(f"/admin/produtos/{product['id']}", data={
        'csrf_token': token, 'name': 'Sérum Luxo', 'price': '64.90', 'is_active': 'false',
    })
    product = store.select('products')[0]
    assert product['name'] == 'Sérum Luxo'
    assert product['is_active'] is False

    client.post(f"/admin/produtos/{product['id']}/excluir", data={'csrf_token': token})
    assert store.select('products') == []


def test_mutation_without_csrf_changes_nothing(client, store, admin_user, login):
    login()
    client.post('/admin/produtos', data={'name': 'Sem token'})
    assert store.select('products') == []


def test_mutation_requires_admin(client, store):
    client.get('/')
    with client.session_transaction() as sess:
        token = sess['csrf_token']
    response = client.post('/admin/produtos', data={'csrf_token': token, 'name': 'Intruso'})
    assert response.status_code == 302
    assert store.select('products') == []


def test_catalog_quick_add_creates_active_product(client, store, admin_user, login):
    token = login()
    html = _text(client.get('/catalogo'))
    assert extract_csrf(html) == token

    response = client.post('/catalogo/produtos', data={
        'csrf_token': token, 'name': 'Pente Fino', 'is_active': 'false',
    })
    assert response.status_code == 302
    rows = store.select('products')
    assert rows[0]['name'] == 'Pente Fino'
    assert rows[0]['is_active'] is True
    assert 'Pente Fino' in _text(client.get('/catalogo'))


def test_quick_add_hides_demo_categories(client, store, admin_user, login):
    login()
    html = _text(client.get('/catalogo'))
    assert '<option value="1">' not in html

    cat = store.insert('categories', {'name': 'Coloração', 'slug': 'coloracao', 'sort_order': 1})
    html = _text(client.get('/catalogo'))
    assert f'<option value="{cat["id"]}">' in html


def test_json_csrf_failure_returns_403(client, admin_user, login):
    login()
    response = client.post('/catalogo/produtos', data=json.dumps({'name': 'X'}),
                           content_type='application/json')
    assert response.status_code == 403


# ==============================================================================
# CLI
# ==============================================================================

def test_create_admin_command(app, services):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['create-admin', 'nova@clamore.com', '--password', 'abc123'])
    assert result.exit_code == 0, result.output

    user = services.user_repo.get_by_email('nova@clamore.com')
    assert user is not None
    assert services.role_repo.roles_for(user.id, ADMIN_ROLE)

    again = runner.invoke(args=['create-admin', 'nova@clamore.com', '--password', 'abc123'])
    assert again.exit_code == 0
    assert len(services.role_repo.roles_for(user.id, ADMIN_ROLE)) == 1
