# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# entities.py -> filas de las tablas (categories, products, sales, site_visits,
#                user_roles) y la sesión autenticada
# reports.py  -> estructuras de vista (catálogo, dashboard)
# ==============================================================================

from .entities import (
    # Catálogo
    Category,
    Product,
    KnownCategory,
    icon_for_slug,
    DEFAULT_CATEGORY_ICON,
    FALLBACK_CATEGORY_LABEL,

    # Ventas y visitas
    Sale,
    SaleStatus,
    Visit,

    # Usuarios
    User,
    UserRole,
    AuthSession,
    AuthEvent,
    ADMIN_ROLE,

    # Helpers
    to_decimal,
    to_money,
    money_str,
    parse_timestamp,
    utc_now,
)
from .reports import (
    Catalog,
    CategorySlice,
    Dashboard,
    DashboardStats,
    TimeSeriesPoint,
)

__all__ = [
    'Category',
    'Product',
    'KnownCategory',
    'icon_for_slug',
    'DEFAULT_CATEGORY_ICON',
    'FALLBACK_CATEGORY_LABEL',
    'Sale',
    'SaleStatus',
    'Visit',
    'User',
    'UserRole',
    'AuthSession',
    'AuthEvent',
    'ADMIN_ROLE',
    'to_decimal',
    'to_money',
    'money_str',
    'parse_timestamp',
    'utc_now',
    'Catalog',
    'CategorySlice',
    'Dashboard',
    'DashboardStats',
    'TimeSeriesPoint',
]
