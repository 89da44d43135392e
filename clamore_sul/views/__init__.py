# ==============================================================================
# CAPA DE VISTAS - Blueprints de Flask
# ==============================================================================
# public.py -> /, /catalogo (con registro de visitas)
# admin.py  -> /admin/* (puerta admin en cada request)
# guards.py -> CSRF, puerta admin y acceso al contenedor
# ==============================================================================

from clamore_sul.views.admin import admin_bp
from clamore_sul.views.public import public_bp

__all__ = ['admin_bp', 'public_bp']
