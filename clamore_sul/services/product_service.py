# ==============================================================================
# SERVICIO DE PRODUCTOS - Alta, edición y baja desde el panel
# ==============================================================================
# Validación SUPERFICIAL (la autoridad final es el almacenamiento):
# - name obligatorio (no vacío)
# - price opcional: texto decimal; vacío = "Consultar"
# - description / image_url / category_id opcionales: vacío = None
# - is_active: True por defecto al crear
#
# Sin aplicación parcial ni merge optimista: tras cada mutación la vista
# redirige y vuelve a leer todo.
# ==============================================================================

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from clamore_sul.exceptions import ValidationError
from clamore_sul.models import Product, money_str, to_money
from clamore_sul.repositories.product_repository import ProductRepository


logger = logging.getLogger(__name__)

_TRUE_VALUES = ('1', 'true', 'on', 'yes', 'sim')
_FALSE_VALUES = ('0', 'false', 'off', 'no', 'nao', 'não', '')


def clean_text(value: Any) -> Optional[str]:
    """Texto sin espacios en los bordes; vacío -> None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_price(raw: Any) -> Optional[Decimal]:
    """
    Parsea un precio opcional.

    Acepta coma decimal ("85,00"). Vacío -> None.

    Raises:
        ValidationError: Texto no numérico o negativo
    """
    text = clean_text(raw)
    if text is None:
        return None
    try:
        price = to_money(text.replace(',', '.'))
    except ValueError as e:
        raise ValidationError("Preço inválido.", field='price') from e
    if price < 0:
        raise ValidationError("Preço inválido.", field='price')
    return price


def parse_flag(raw: Any, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError("Valor inválido para ativo.", field='is_active')


class ProductService:
    """Mutaciones de productos."""

    def __init__(self, product_repo: ProductRepository):
        self.product_repo = product_repo

    def list_products(self, token: str = None) -> List[Product]:
        return self.product_repo.list_all(token=token)

    @staticmethod
    def build_payload(fields: Mapping[str, Any], creating: bool) -> Dict[str, Any]:
        """
        Valida el formulario y arma las columnas a escribir.

        Args:
            fields: Campos del formulario (request.form o dict)
            creating: True en alta (is_active por defecto True);
                      en edición un is_active ausente no se toca

        Raises:
            ValidationError: Campo obligatorio ausente o tipo inválido
        """
        name = clean_text(fields.get('name'))
        if not name:
            raise ValidationError("O nome do produto é obrigatório.", field='name')

        payload = {
            'name': name,
            'description': clean_text(fields.get('description')),
            'price': money_str(parse_price(fields.get('price'))),
            'image_url': clean_text(fields.get('image_url')),
            'category_id': clean_text(fields.get('category_id')),
        }
        if creating:
            payload['is_active'] = parse_flag(fields.get('is_active'), True)
        elif fields.get('is_active') is not None:
            payload['is_active'] = parse_flag(fields.get('is_active'), True)
        return payload

    def create_product(self, fields: Mapping[str, Any], token: str = None) -> Product:
        """
        Crea un producto.

        Raises:
            ValidationError: Formulario inválido (no se escribe nada)
            StoreError: El almacenamiento rechazó la escritura
        """
        payload = self.build_payload(fields, creating=True)
        product = self.product_repo.create(payload, token=token)
        logger.info("Produto criado: %s (%s)", product.name, product.id)
        return product

    def update_product(self, product_id: str, fields: Mapping[str, Any], token: str = None) -> Product:
        if not product_id:
            raise ValidationError("Produto não informado.", field='id')
        payload = self.build_payload(fields, creating=False)
        product = self.product_repo.update(product_id, payload, token=token)
        logger.info("Produto atualizado: %s (%s)", product.name, product.id)
        return product

    def delete_product(self, product_id: str, token: str = None) -> None:
        if not product_id:
            raise ValidationError("Produto não informado.", field='id')
        self.product_repo.delete(product_id, token=token)
        logger.info("Produto excluído: %s", product_id)
