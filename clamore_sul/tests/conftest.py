import re

import pytest

from clamore_sul.app_container import AppContainer
from clamore_sul.config import Config
from clamore_sul.main import create_app
from clamore_sul.models import ADMIN_ROLE
from clamore_sul.views.guards import CONTAINER_KEY


ADMIN_EMAIL = 'admin@clamoresul.com.br'
ADMIN_PASSWORD = 'segredo-admin'
USER_EMAIL = 'cliente@exemplo.com'
USER_PASSWORD = 'segredo-cliente'

CSRF_RE = re.compile(r'name="csrf_token" value="([0-9a-f]+)"')


@pytest.fixture
def config(tmp_path):
    return Config(
        secret_key='test-secret',
        data_dir=str(tmp_path / 'data'),
        logs_dir=str(tmp_path / 'logs'),
        enable_profiling=False,
        testing=True,
    )


@pytest.fixture
def app(config):
    application = create_app(config)
    yield application
    AppContainer.reset_instance()


@pytest.fixture
def services(app):
    return app.extensions[CONTAINER_KEY]


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def admin_user(services):
    user = services.user_repo.create_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    services.role_repo.grant(user.id, ADMIN_ROLE)
    return user


@pytest.fixture
def plain_user(services):
    return services.user_repo.create_user(USER_EMAIL, USER_PASSWORD)


def extract_csrf(html):
    m = CSRF_RE.search(html)
    assert m, 'no csrf token in page'
    return m.group(1)


@pytest.fixture
def login(client):
    """Inicia sesión por el formulario y retorna el token CSRF vigente."""
    def _login(email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
        getr = client.get('/admin/login')
        assert getr.status_code == 200
        token = extract_csrf(getr.get_data(as_text=True))
        client.post('/admin/login', data={
            'email': email,
            'password': password,
            'csrf_token': token,
        })
        return token
    return _login
