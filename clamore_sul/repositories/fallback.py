# ==============================================================================
# ALMACENAMIENTO DE DOS NIVELES - Datos reales con respaldo de demostración
# ==============================================================================
# La vitrina nunca debe aparecer vacía antes de cargar datos reales:
#   PrimaryStore  -> tablas categories/products
#   FallbackStore -> 3 categorías y 3 productos de demostración fijos
# FallbackRepository intenta el primario y, si no hay filas (o la lectura
# falla en la parte pública), entrega el respaldo. No es una caché.
# ==============================================================================

import logging
from decimal import Decimal
from typing import Callable, List, Tuple

from clamore_sul.exceptions import StoreError
from clamore_sul.models import Category, Product
from clamore_sul.repositories.category_repository import CategoryRepository
from clamore_sul.repositories.product_repository import ProductRepository


logger = logging.getLogger(__name__)


DEMO_CATEGORIES = (
    ('1', 'Tratamento', 'tratamento'),
    ('2', 'Coloração', 'coloracao'),
    ('3', 'Finalização', 'finalizacao'),
)

DEMO_PRODUCTS = (
    {
        'id': 'demo1',
        'name': 'Kit Reconstrução Prime',
        'category_id': '1',
        'description': 'Tratamento intensivo para cabelos danificados com queratina pura e óleos essenciais.',
        'price': Decimal('189.90'),
        'image_url': 'https://images.unsplash.com/photo-1527799822344-429dfa8a810d?auto=format&fit=crop&q=80&w=800',
    },
    {
        'id': 'demo2',
        'name': 'Sérum Finalizador Luxo',
        'category_id': '3',
        'description': 'Brilho instantâneo e proteção térmica com toque sedoso e aroma sofisticado.',
        'price': Decimal('85.00'),
        'image_url': 'https://images.unsplash.com/photo-1535585209827-a15fcdbc4c2d?auto=format&fit=crop&q=80&w=800',
    },
    {
        'id': 'demo3',
        'name': 'Máscara Color Reflect',
        'category_id': '2',
        'description': 'Proteção da cor e nutrição profunda para cabelos coloridos e descoloridos.',
        'price': Decimal('124.50'),
        'image_url': 'https://images.unsplash.com/photo-1599422315624-c102a061405b?auto=format&fit=crop&q=80&w=800',
    },
)


class PrimaryStore:
    """Origen real de la vitrina: tablas del almacenamiento."""

    def __init__(self, category_repo: CategoryRepository, product_repo: ProductRepository):
        self.category_repo = category_repo
        self.product_repo = product_repo

    def list_categories(self) -> List[Category]:
        return self.category_repo.list_ordered()

    def list_active_products(self) -> List[Product]:
        return self.product_repo.list_active()


class FallbackStore:
    """Conjunto de demostración. Retorna copias nuevas en cada llamada."""

    def list_categories(self) -> List[Category]:
        return [
            Category(id=cid, name=name, slug=slug, description='', sort_order=i)
            for i, (cid, name, slug) in enumerate(DEMO_CATEGORIES)
        ]

    def list_active_products(self) -> List[Product]:
        return [Product(is_active=True, sort_order=i, **data) for i, data in enumerate(DEMO_PRODUCTS)]


class FallbackRepository:
    """
    Decorador de dos niveles: primario, y si viene vacío, respaldo.

    Cada método retorna (items, from_fallback).
    """

    def __init__(self, primary, fallback=None, fallback_on_error: bool = True):
        """
        Args:
            primary: CatalogSource real
            fallback: CatalogSource de demostración (FallbackStore por defecto)
            fallback_on_error: Degradar al respaldo si el primario lanza StoreError
        """
        self.primary = primary
        self.fallback = fallback or FallbackStore()
        self.fallback_on_error = fallback_on_error

    def _read(self, name: str, primary_call: Callable[[], list],
              fallback_call: Callable[[], list]) -> Tuple[list, bool]:
        try:
            items = primary_call()
        except StoreError as e:
            if not self.fallback_on_error:
                raise
            logger.warning("Leitura de %s falhou, usando dados de demonstração: %s", name, e)
            return fallback_call(), True
        if items:
            return items, False
        return fallback_call(), True

    def list_categories(self) -> Tuple[List[Category], bool]:
        return self._read('categorias', self.primary.list_categories,
                          self.fallback.list_categories)

    def list_active_products(self) -> Tuple[List[Product], bool]:
        return self._read('produtos', self.primary.list_active_products,
                          self.fallback.list_active_products)
