# ==============================================================================
# REPOSITORIO DE CATEGORÍAS
# ==============================================================================
# Tabla categories: [{id, name, slug, description, sort_order}, ...]
# ==============================================================================

from typing import List

from clamore_sul.models import Category
from clamore_sul.repositories.base import TableRepository


class CategoryRepository(TableRepository):
    """Acceso a la tabla categories."""

    table = 'categories'

    def list_ordered(self, token: str = None) -> List[Category]:
        """Todas las categorías ordenadas por sort_order."""
        rows = self.store.select(self.table, order_by='sort_order', token=token)
        return [Category.from_dict(r) for r in rows]

    def create(self, category: Category) -> Category:
        data = category.to_dict()
        if not data.get('id'):
            data.pop('id')
        return Category.from_dict(self.store.insert(self.table, data))
