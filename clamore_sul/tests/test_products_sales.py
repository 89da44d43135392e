from decimal import Decimal

import pytest

from clamore_sul.exceptions import StoreError, ValidationError
from clamore_sul.models import to_money
from clamore_sul.repositories import JsonTableStore, ProductRepository, SaleRepository
from clamore_sul.services.product_service import ProductService, parse_flag, parse_price
from clamore_sul.services.sale_service import SaleService, parse_quantity, parse_status


@pytest.fixture
def json_store(tmp_path):
    return JsonTableStore(str(tmp_path))


@pytest.fixture
def products(json_store):
    return ProductService(ProductRepository(json_store))


@pytest.fixture
def sales(json_store):
    return SaleService(SaleRepository(json_store))


# ==============================================================================
# DINERO
# ==============================================================================

def test_to_money_rounds_half_up_and_rejects_garbage():
    assert to_money('10.005') == Decimal('10.01')
    assert to_money(10.5) == Decimal('10.50')
    assert to_money('') is None
    for bad in ('abc', 'NaN', 'Infinity'):
        with pytest.raises(ValueError):
            to_money(bad)


def test_parse_price_accepts_comma_decimal():
    assert parse_price('85,00') == Decimal('85.00')
    assert parse_price('  ') is None
    with pytest.raises(ValidationError):
        parse_price('-1')
    with pytest.raises(ValidationError):
        parse_price('grátis')


# ==============================================================================
# VENTAS
# ==============================================================================

def test_sale_total_is_exact_and_persisted_as_cents(sales, json_store):
    sale = sales.create_sale({'quantity': '3', 'unit_price': '10.50'})

    assert sale.total == Decimal('31.50')
    row = json_store.select('sales')[0]
    assert row['total'] == '31.50'
    assert row['unit_price'] == '10.50'
    assert row['status'] == 'concluida'
    assert row['sale_date']


def test_sale_optional_fields_become_null(sales, json_store):
    sales.create_sale({'quantity': '1', 'unit_price': '5', 'customer_name': '  ',
                       'product_id': '', 'notes': ' entregue '})
    row = json_store.select('sales')[0]
    assert row['customer_name'] is None
    assert row['product_id'] is None
    assert row['notes'] == 'entregue'


@pytest.mark.parametrize('fields', [
    {'unit_price': '10'},
    {'quantity': '0', 'unit_price': '10'},
    {'quantity': '1.5', 'unit_price': '10'},
    {'quantity': '2'},
    {'quantity': '2', 'unit_price': '-3'},
    {'quantity': '2', 'unit_price': '10', 'status': 'perdida'},
])
def test_invalid_sale_is_rejected_without_writing(sales, json_store, fields):
    with pytest.raises(ValidationError):
        sales.create_sale(fields)
    assert json_store.select('sales') == []


def test_sale_parsers():
    assert parse_quantity(' 4 ') == 4
    assert parse_status('PENDENTE') == 'pendente'
    assert parse_status(None) == 'concluida'
    assert SaleService.compute_total(7, Decimal('0.10')) == Decimal('0.70')


def test_store_rejection_surfaces_raw_message(json_store):
    class RejectingRepo:
        def create(self, payload, token=None):
            raise StoreError('new row violates row-level security policy for table "sales"', status=403)

    with pytest.raises(StoreError, match='row-level security'):
        SaleService(RejectingRepo()).create_sale({'quantity': '1', 'unit_price': '1'})


# ==============================================================================
# PRODUCTOS
# ==============================================================================

def test_create_product_defaults(products, json_store):
    product = products.create_product({
        'name': '  Óleo Reparador ',
        'description': '',
        'price': '',
        'image_url': ' ',
        'category_id': '',
    })

    assert product.name == 'Óleo Reparador'
    assert product.is_active is True
    row = json_store.select('products')[0]
    assert row['description'] is None
    assert row['price'] is None
    assert row['image_url'] is None
    assert row['category_id'] is None
    assert row['created_at']


def test_product_name_is_required(products, json_store):
    with pytest.raises(ValidationError, match='nome'):
        products.create_product({'name': '   ', 'price': '10'})
    assert json_store.select('products') == []


def test_update_product_keeps_flag_when_absent(products):
    created = products.create_product({'name': 'Tinta', 'price': '29,9', 'is_active': 'false'})
    assert created.price == Decimal('29.90')
    assert created.is_active is False

    updated = products.update_product(created.id, {'name': 'Tinta 7.0', 'price': '31'})
    assert updated.name == 'Tinta 7.0'
    assert updated.price == Decimal('31.00')
    assert updated.is_active is False

    reactivated = products.update_product(created.id, {'name': 'Tinta 7.0', 'is_active': 'on'})
    assert reactivated.is_active is True


def test_update_missing_product_raises_store_error(products):
    with pytest.raises(StoreError):
        products.update_product('nao-existe', {'name': 'X'})


def test_delete_product(products, json_store):
    created = products.create_product({'name': 'Escova'})
    products.delete_product(created.id)
    assert products.list_products() == []
    with pytest.raises(ValidationError):
        products.delete_product('')


def test_parse_flag():
    assert parse_flag(None, True) is True
    assert parse_flag('sim', False) is True
    assert parse_flag('', True) is False
    with pytest.raises(ValidationError):
        parse_flag('talvez', True)
