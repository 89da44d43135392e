# ==============================================================================
# SERVICIO DE CATÁLOGO - Consulta y filtrado de la vitrina
# ==============================================================================
# Carga categorías y productos activos (con respaldo de demostración) y
# resuelve todo lo que la plantilla necesita por producto: etiqueta de
# categoría, ícono, precio formateado y enlace de WhatsApp.
#
# filter_products es PURO: no toca el almacenamiento y preserva el orden.
# ==============================================================================

from typing import List, Optional, Sequence
from urllib.parse import quote

from clamore_sul.models import (
    FALLBACK_CATEGORY_LABEL,
    Catalog,
    Category,
    Product,
    icon_for_slug,
)
from clamore_sul.performance_logger import profile_function
from clamore_sul.repositories.fallback import FallbackRepository


EMPTY_CATALOG_MESSAGE = (
    "Nenhum produto cadastrado ainda. Adicione produtos pelo painel administrativo."
)
NO_MATCH_MESSAGE = "Nenhum produto encontrado."

WHATSAPP_TEMPLATE = "Olá, tenho interesse no produto: {name}"


class CatalogService:
    """Vitrina pública: carga, filtros y presentación de productos."""

    def __init__(self, catalog_repo: FallbackRepository, whatsapp_number: str):
        """
        Args:
            catalog_repo: Repositorio de dos niveles (primario + demostración)
            whatsapp_number: Número de contacto (solo dígitos, con país)
        """
        self.catalog_repo = catalog_repo
        self.whatsapp_number = whatsapp_number

    @profile_function(name="Cargar catálogo")
    def load_catalog(self) -> Catalog:
        """
        Categorías por sort_order y productos activos por sort_order.

        Cada lista cae al respaldo de forma independiente.
        """
        categories, categories_fallback = self.catalog_repo.list_categories()
        products, products_fallback = self.catalog_repo.list_active_products()
        return Catalog(
            categories=categories,
            products=products,
            categories_from_fallback=categories_fallback,
            products_from_fallback=products_fallback,
        )

    # =========================================================================
    # FILTROS
    # =========================================================================

    @staticmethod
    def filter_products(products: Sequence[Product],
                        active_category_id: Optional[str] = None,
                        search_text: str = '') -> List[Product]:
        """
        Filtra por categoría Y por texto en el nombre.

        Args:
            products: Productos cargados
            active_category_id: None = todas las categorías
            search_text: Subcadena buscada sin distinguir mayúsculas ('' = todo)

        Returns:
            Subconjunto en el mismo orden de entrada
        """
        needle = (search_text or '').casefold()
        result = []
        for product in products:
            if active_category_id is not None and product.category_id != active_category_id:
                continue
            if needle and needle not in (product.name or '').casefold():
                continue
            result.append(product)
        return result

    @staticmethod
    def empty_message(all_products: Sequence[Product], filtered: Sequence[Product]) -> Optional[str]:
        """Mensaje de estado vacío, o None si hay productos que mostrar."""
        if filtered:
            return None
        if not all_products:
            return EMPTY_CATALOG_MESSAGE
        return NO_MATCH_MESSAGE

    # =========================================================================
    # PRESENTACIÓN
    # =========================================================================

    @staticmethod
    def category_label(product: Product, categories: Sequence[Category]) -> str:
        for category in categories:
            if category.id == product.category_id:
                return category.name
        return FALLBACK_CATEGORY_LABEL

    @staticmethod
    def icon_for(category: Optional[Category]) -> str:
        return icon_for_slug(category.slug if category else None)

    def whatsapp_link(self, product: Product) -> str:
        """Enlace wa.me con el mensaje pre-llenado para este producto."""
        text = WHATSAPP_TEMPLATE.format(name=product.name)
        return f"https://wa.me/{self.whatsapp_number}?text={quote(text)}"

    @staticmethod
    def format_price(price) -> str:
        # Precio ausente (o cero) se muestra como "Consultar"
        if not price:
            return "Consultar"
        return f"R$ {price:.2f}"
