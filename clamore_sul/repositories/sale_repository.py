# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================
# Tabla sales: [{id, customer_name, product_id, quantity, unit_price, total,
#                status, notes, sale_date}, ...]
# total se guarda tal como lo calcula SaleService; aquí no se recalcula.
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, List

from clamore_sul.models import Sale
from clamore_sul.repositories.base import TableRepository


class SaleRepository(TableRepository):
    """Acceso a la tabla sales."""

    table = 'sales'

    def list_between(self, start: datetime, end: datetime, token: str = None) -> List[Sale]:
        """
        Ventas con sale_date dentro de [start, end], más recientes primero.

        Args:
            start: Límite inferior inclusivo
            end: Límite superior inclusivo
        """
        rows = self.store.select(
            self.table,
            gte={'sale_date': start},
            lte={'sale_date': end},
            order_by='sale_date',
            descending=True,
            token=token,
        )
        return [Sale.from_dict(r) for r in rows]

    def create(self, payload: Dict[str, Any], token: str = None) -> Sale:
        return Sale.from_dict(self.store.insert(self.table, payload, token=token))
