import uuid

from clamore_sul.services.visit_service import VISITOR_KEY, VisitService


class _FailingVisitRepo:
    def __init__(self):
        self.calls = 0

    def append(self, payload):
        self.calls += 1
        raise RuntimeError('insert blocked by policy')


class _RecordingVisitRepo:
    def __init__(self):
        self.rows = []

    def append(self, payload):
        self.rows.append(payload)


# ==============================================================================
# IDENTIFICADOR DE VISITANTE
# ==============================================================================

def test_visitor_id_is_stable_while_storage_persists():
    storage = {}
    first = VisitService.ensure_visitor_id(storage)
    second = VisitService.ensure_visitor_id(storage)
    assert first == second
    assert storage[VISITOR_KEY] == first
    uuid.UUID(first)


def test_clearing_storage_yields_new_visitor_id():
    storage = {}
    first = VisitService.ensure_visitor_id(storage)
    storage.clear()
    assert VisitService.ensure_visitor_id(storage) != first


# ==============================================================================
# REGISTRO
# ==============================================================================

def test_record_visit_writes_row():
    repo = _RecordingVisitRepo()
    VisitService(repo).record_visit('v-1', '/catalogo', referrer='', user_agent='Mozilla/5.0')
    assert repo.rows == [{
        'visitor_id': 'v-1',
        'page': '/catalogo',
        'referrer': None,
        'user_agent': 'Mozilla/5.0',
    }]


def test_record_visit_swallows_errors():
    repo = _FailingVisitRepo()
    assert VisitService(repo).record_visit('v-1', '/') is None
    assert repo.calls == 1


# ==============================================================================
# RASTREO EN LAS PÁGINAS
# ==============================================================================

def _visits(store):
    return store.select('site_visits')


def test_public_pages_set_cookie_and_record_one_visit_each(client, store):
    client.get('/', headers={'Referer': 'https://busca.example/'})
    cookie = client.get_cookie(VISITOR_KEY)
    assert cookie is not None

    client.get('/catalogo?q=kit')
    rows = _visits(store)
    assert [r['page'] for r in rows] == ['/', '/catalogo']
    assert {r['visitor_id'] for r in rows} == {cookie.value}
    assert rows[0]['referrer'] == 'https://busca.example/'
    assert rows[1]['referrer'] is None


def test_cleared_cookie_starts_a_new_visitor(client, store):
    client.get('/')
    first = client.get_cookie(VISITOR_KEY).value
    client.delete_cookie(VISITOR_KEY)
    client.get('/')
    second = client.get_cookie(VISITOR_KEY).value
    assert first != second
    assert len({r['visitor_id'] for r in _visits(store)}) == 2


def test_visitor_id_is_independent_of_login(client, store, admin_user, login):
    client.get('/')
    before = client.get_cookie(VISITOR_KEY).value
    login()
    client.get('/catalogo')
    assert client.get_cookie(VISITOR_KEY).value == before


def test_admin_pages_are_not_tracked(client, store, admin_user, login):
    login()
    client.get('/admin')
    client.get('/admin/login')
    assert _visits(store) == []


def test_tracking_failure_does_not_break_page(client, services):
    services.visit_service.visit_repo = _FailingVisitRepo()
    response = client.get('/')
    assert response.status_code == 200
