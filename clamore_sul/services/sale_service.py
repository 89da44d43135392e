# ==============================================================================
# SERVICIO DE VENTAS - Registro manual desde el panel
# ==============================================================================
# REGLAS:
# - quantity: entero positivo (obligatorio)
# - unit_price: decimal no negativo (obligatorio), redondeado a centavos
# - total = quantity * unit_price, calculado UNA vez y persistido
#   (3 x 10.50 se guarda como "31.50", sin error binario)
# - status: "concluida" por defecto
# - customer_name / product_id / notes: opcionales
# ==============================================================================

import logging
from decimal import Decimal
from typing import Any, Mapping

from clamore_sul.exceptions import ValidationError
from clamore_sul.models import Sale, SaleStatus, money_str, to_money
from clamore_sul.repositories.sale_repository import SaleRepository
from clamore_sul.services.product_service import clean_text


logger = logging.getLogger(__name__)


def parse_quantity(raw: Any) -> int:
    text = clean_text(raw)
    if text is None:
        raise ValidationError("Informe a quantidade.", field='quantity')
    try:
        quantity = int(text)
    except ValueError as e:
        raise ValidationError("Quantidade inválida.", field='quantity') from e
    if quantity <= 0:
        raise ValidationError("A quantidade deve ser maior que zero.", field='quantity')
    return quantity


def parse_unit_price(raw: Any) -> Decimal:
    text = clean_text(raw)
    if text is None:
        raise ValidationError("Informe o preço unitário.", field='unit_price')
    try:
        price = to_money(text.replace(',', '.'))
    except ValueError as e:
        raise ValidationError("Preço unitário inválido.", field='unit_price') from e
    if price < 0:
        raise ValidationError("Preço unitário inválido.", field='unit_price')
    return price


def parse_status(raw: Any) -> str:
    text = clean_text(raw)
    if text is None:
        return SaleStatus.CONCLUIDA.value
    try:
        return SaleStatus(text.lower()).value
    except ValueError as e:
        raise ValidationError("Status de venda inválido.", field='status') from e


class SaleService:
    """Registro de ventas."""

    def __init__(self, sale_repo: SaleRepository):
        self.sale_repo = sale_repo

    @staticmethod
    def compute_total(quantity: int, unit_price: Decimal) -> Decimal:
        """quantity * unit_price exacto, redondeado a centavos."""
        return to_money(Decimal(quantity) * unit_price)

    def create_sale(self, fields: Mapping[str, Any], token: str = None) -> Sale:
        """
        Valida y registra una venta.

        Args:
            fields: Campos del formulario (request.form o dict)
            token: Token del admin (backend hospedado)

        Returns:
            La venta persistida (con id y sale_date asignados)

        Raises:
            ValidationError: Cantidad/precio ausentes o inválidos
            StoreError: El almacenamiento rechazó la escritura
        """
        quantity = parse_quantity(fields.get('quantity'))
        unit_price = parse_unit_price(fields.get('unit_price'))
        total = self.compute_total(quantity, unit_price)

        payload = {
            'customer_name': clean_text(fields.get('customer_name')),
            'product_id': clean_text(fields.get('product_id')),
            'quantity': quantity,
            'unit_price': money_str(unit_price),
            'total': money_str(total),
            'status': parse_status(fields.get('status')),
            'notes': clean_text(fields.get('notes')),
        }
        sale = self.sale_repo.create(payload, token=token)
        logger.info("Venda registrada: %s x %s = %s", quantity, unit_price, total)
        return sale
