# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la aplicación.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las vistas (blueprints) solo llaman a servicios
# 4. Los servicios NO conocen el tipo de almacenamiento (JSON/REST)
#
# ESTRUCTURA:
# ├── auth_service.py      → Login, sesión, rol admin, suscripciones
# ├── visit_service.py     → visitor_id y registro de visitas
# ├── catalog_service.py   → Vitrina: carga, filtros, WhatsApp
# ├── dashboard_service.py → Panel: lecturas en paralelo + agregación
# ├── product_service.py   → Alta/edición/baja de productos
# └── sale_service.py      → Registro de ventas
#
# SEGURIDAD CRÍTICA - ROL "admin":
# El acceso al panel exige una fila en user_roles con role == "admin".
# La verificación es en BACKEND y se repite en cada request del panel.
# ==============================================================================

from clamore_sul.services.auth_service import AuthService
from clamore_sul.services.visit_service import VisitService
from clamore_sul.services.catalog_service import CatalogService
from clamore_sul.services.dashboard_service import DashboardLoader, DashboardService
from clamore_sul.services.product_service import ProductService
from clamore_sul.services.sale_service import SaleService

__all__ = [
    'AuthService',
    'VisitService',
    'CatalogService',
    'DashboardService',
    'DashboardLoader',
    'ProductService',
    'SaleService',
]
