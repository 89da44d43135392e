# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso al almacenamiento.
#
# ESTRUCTURA:
# ├── interfaces.py          → Protocolos (TableStore, AuthBackend, CatalogSource)
# ├── base.py                → JsonTableStore (archivos locales) y TableRepository
# ├── rest_store.py          → RestTableStore / RestAuthBackend (plataforma hospedada)
# ├── category_repository.py → categories
# ├── product_repository.py  → products
# ├── sale_repository.py     → sales
# ├── visit_repository.py    → site_visits
# ├── user_repository.py     → user_roles, users, LocalAuthBackend
# └── fallback.py            → PrimaryStore / FallbackStore / FallbackRepository
# ==============================================================================

from .interfaces import AuthBackend, CatalogSource, TableStore
from .base import JsonTableStore, TableRepository
from .rest_store import RestAuthBackend, RestTableStore
from .category_repository import CategoryRepository
from .product_repository import ProductRepository
from .sale_repository import SaleRepository
from .visit_repository import VisitRepository
from .user_repository import LocalAuthBackend, RoleRepository, UserRepository
from .fallback import FallbackRepository, FallbackStore, PrimaryStore

__all__ = [
    # Interfaces
    'AuthBackend',
    'CatalogSource',
    'TableStore',

    # Backends
    'JsonTableStore',
    'RestTableStore',
    'RestAuthBackend',
    'LocalAuthBackend',

    # Repositorios
    'TableRepository',
    'CategoryRepository',
    'ProductRepository',
    'SaleRepository',
    'VisitRepository',
    'RoleRepository',
    'UserRepository',

    # Dos niveles
    'PrimaryStore',
    'FallbackStore',
    'FallbackRepository',
]
