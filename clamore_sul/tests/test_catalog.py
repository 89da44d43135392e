from decimal import Decimal
from urllib.parse import quote

import pytest

from clamore_sul.exceptions import StoreError
from clamore_sul.models import Category, Product, icon_for_slug
from clamore_sul.repositories import (
    CategoryRepository,
    FallbackRepository,
    JsonTableStore,
    PrimaryStore,
    ProductRepository,
)
from clamore_sul.services.catalog_service import (
    EMPTY_CATALOG_MESSAGE,
    NO_MATCH_MESSAGE,
    CatalogService,
)


DEMO_NAMES = ['Kit Reconstrução Prime', 'Sérum Finalizador Luxo', 'Máscara Color Reflect']


@pytest.fixture
def products():
    return [
        Product(id='p1', name='Kit Reconstrução Prime', category_id='1', price=Decimal('189.90')),
        Product(id='p2', name='Sérum Finalizador', category_id='3'),
        Product(id='p3', name='Máscara Kit Color', category_id='2', price=Decimal('124.50')),
        Product(id='p4', name='Escova Térmica', category_id='1'),
    ]


class _StubSource:
    def __init__(self, categories=None, products=None, error=None):
        self.categories = categories or []
        self.products = products or []
        self.error = error

    def list_categories(self):
        if self.error:
            raise self.error
        return self.categories

    def list_active_products(self):
        if self.error:
            raise self.error
        return self.products


def _service(source):
    return CatalogService(FallbackRepository(source), '5547999999999')


# ==============================================================================
# FILTROS
# ==============================================================================

def test_filter_without_criteria_is_identity(products):
    assert CatalogService.filter_products(products, None, '') == products


def test_filter_is_conjunction_of_single_filters(products):
    for category in ('1', '2', '3', 'x'):
        for search in ('kit', 'a', 'zzz', ''):
            both = CatalogService.filter_products(products, category, search)
            by_category = CatalogService.filter_products(products, category, '')
            by_text = CatalogService.filter_products(products, None, search)
            assert all(p in by_category and p in by_text for p in both)


def test_filter_is_case_insensitive(products):
    upper = CatalogService.filter_products(products, None, 'KIT')
    lower = CatalogService.filter_products(products, None, 'kit')
    assert upper == lower
    assert [p.id for p in lower] == ['p1', 'p3']


def test_filter_preserves_input_order(products):
    result = CatalogService.filter_products(list(reversed(products)), '1', '')
    assert [p.id for p in result] == ['p4', 'p1']


def test_empty_messages_distinguish_empty_catalog_from_no_match(products):
    assert CatalogService.empty_message([], []) == EMPTY_CATALOG_MESSAGE
    assert CatalogService.empty_message(products, []) == NO_MATCH_MESSAGE
    assert CatalogService.empty_message(products, products[:1]) is None


# ==============================================================================
# PRESENTACIÓN
# ==============================================================================

def test_category_label_falls_back_for_dangling_reference():
    categories = [Category(id='1', name='Tratamento', slug='tratamento')]
    assert CatalogService.category_label(Product(id='a', name='A', category_id='1'), categories) == 'Tratamento'
    assert CatalogService.category_label(Product(id='b', name='B', category_id='99'), categories) == 'Cosmético'
    assert CatalogService.category_label(Product(id='c', name='C'), categories) == 'Cosmético'


def test_icons_use_known_categories_with_default():
    assert icon_for_slug('tratamento') == 'sparkles'
    assert icon_for_slug('coloracao') == 'palette'
    assert icon_for_slug('Finalização') == 'wind'
    assert icon_for_slug('perfumaria') == 'package'
    assert icon_for_slug(None) == 'package'
    assert CatalogService.icon_for(None) == 'package'


def test_whatsapp_link_prefills_product_name():
    service = _service(_StubSource())
    link = service.whatsapp_link(Product(id='p1', name='Kit Reconstrução Prime'))
    expected_text = quote('Olá, tenho interesse no produto: Kit Reconstrução Prime')
    assert link == f'https://wa.me/5547999999999?text={expected_text}'


def test_format_price():
    assert CatalogService.format_price(Decimal('189.9')) == 'R$ 189.90'
    assert CatalogService.format_price(Decimal('85')) == 'R$ 85.00'
    assert CatalogService.format_price(None) == 'Consultar'


# ==============================================================================
# CARGA CON RESPALDO
# ==============================================================================

def test_empty_store_loads_demo_catalog(tmp_path):
    store = JsonTableStore(str(tmp_path))
    primary = PrimaryStore(CategoryRepository(store), ProductRepository(store))
    catalog = _service(primary).load_catalog()

    assert len(catalog.categories) == 3
    assert [p.name for p in catalog.products] == DEMO_NAMES
    assert catalog.categories_from_fallback and catalog.products_from_fallback
    assert all(p.image_url and p.price for p in catalog.products)
    category_ids = {c.id for c in catalog.categories}
    assert all(p.category_id in category_ids for p in catalog.products)


def test_real_rows_replace_demo_data(tmp_path):
    store = JsonTableStore(str(tmp_path))
    store.insert('categories', {'name': 'Acessórios', 'slug': 'acessorios', 'sort_order': 2})
    store.insert('categories', {'name': 'Tratamento', 'slug': 'tratamento', 'sort_order': 1})
    store.insert('products', {'name': 'Escova', 'is_active': True, 'sort_order': 2})
    store.insert('products', {'name': 'Pente', 'is_active': True, 'sort_order': 1})
    store.insert('products', {'name': 'Inativo', 'is_active': False, 'sort_order': 0})

    primary = PrimaryStore(CategoryRepository(store), ProductRepository(store))
    catalog = _service(primary).load_catalog()

    assert [c.name for c in catalog.categories] == ['Tratamento', 'Acessórios']
    assert [p.name for p in catalog.products] == ['Pente', 'Escova']
    assert not catalog.products_from_fallback


def test_fallback_applies_to_each_list_independently():
    source = _StubSource(categories=[Category(id='c', name='Única', slug='x')])
    catalog = _service(source).load_catalog()
    assert [c.name for c in catalog.categories] == ['Única']
    assert [p.name for p in catalog.products] == DEMO_NAMES


def test_read_failure_degrades_to_demo_data():
    catalog = _service(_StubSource(error=StoreError('offline'))).load_catalog()
    assert [p.name for p in catalog.products] == DEMO_NAMES


def test_read_failure_propagates_when_fallback_on_error_disabled():
    repo = FallbackRepository(_StubSource(error=StoreError('offline')), fallback_on_error=False)
    with pytest.raises(StoreError):
        repo.list_active_products()


def test_demo_data_is_copied_per_call():
    repo = FallbackRepository(_StubSource())
    first, _ = repo.list_active_products()
    first[0].name = 'alterado'
    second, _ = repo.list_active_products()
    assert second[0].name == 'Kit Reconstrução Prime'
