# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Tabla products. La vitrina solo ve is_active = true; el panel ve todos.
# ==============================================================================

from typing import Any, Dict, List, Optional

from clamore_sul.models import Product
from clamore_sul.repositories.base import TableRepository


class ProductRepository(TableRepository):
    """Acceso a la tabla products."""

    table = 'products'

    def list_active(self) -> List[Product]:
        """Productos activos ordenados por sort_order (vitrina)."""
        rows = self.store.select(self.table, filters={'is_active': True}, order_by='sort_order')
        return [Product.from_dict(r) for r in rows]

    def list_all(self, token: str = None) -> List[Product]:
        """Todos los productos, más recientes primero (panel)."""
        rows = self.store.select(self.table, order_by='created_at', descending=True, token=token)
        return [Product.from_dict(r) for r in rows]

    def get(self, product_id: str) -> Optional[Product]:
        rows = self.store.select(self.table, filters={'id': product_id})
        return Product.from_dict(rows[0]) if rows else None

    def create(self, payload: Dict[str, Any], token: str = None) -> Product:
        """
        Inserta un producto.

        Args:
            payload: Columnas a escribir (sin id)
            token: Token del admin (backend hospedado)
        """
        return Product.from_dict(self.store.insert(self.table, payload, token=token))

    def update(self, product_id: str, payload: Dict[str, Any], token: str = None) -> Product:
        return Product.from_dict(self.store.update(self.table, product_id, payload, token=token))

    def delete(self, product_id: str, token: str = None) -> None:
        self.store.delete(self.table, product_id, token=token)
