# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos que cualquier backend de almacenamiento debe cumplir. Permiten:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Los servicios dependen de estas interfaces, NO del backend concreto
#    - JsonTableStore (archivos locales) y RestTableStore (plataforma
#      hospedada) son intercambiables desde app_container.py
#
# 2. TESTING
#    - Fácil crear dobles que implementen estas interfaces
#
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from clamore_sul.models import AuthSession, Category, Product


Row = Dict[str, Any]


@runtime_checkable
class TableStore(Protocol):
    """
    Almacenamiento tabular: select filtrado, insert, update y delete por id.

    Todos los métodos lanzan StoreError ante cualquier fallo.
    token: token de acceso del usuario (solo lo usa el backend hospedado).
    """

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        gte: Optional[Dict[str, datetime]] = None,
        lte: Optional[Dict[str, datetime]] = None,
        token: Optional[str] = None,
    ) -> List[Row]:
        """select * where col = v [and col >= a and col <= b] order by col"""
        ...

    def insert(self, table: str, row: Row, token: Optional[str] = None) -> Row:
        """Inserta una fila y retorna la fila creada (con id)."""
        ...

    def update(self, table: str, row_id: str, changes: Row, token: Optional[str] = None) -> Row:
        """Actualiza parcialmente la fila con ese id y la retorna."""
        ...

    def delete(self, table: str, row_id: str, token: Optional[str] = None) -> None:
        """Elimina la fila con ese id."""
        ...


@runtime_checkable
class AuthBackend(Protocol):
    """Verificación de credenciales y cierre de sesión."""

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Lanza InvalidCredentialsError si las credenciales no son válidas."""
        ...

    def sign_out(self, session: AuthSession) -> None:
        ...


@runtime_checkable
class CatalogSource(Protocol):
    """Origen de datos de la vitrina (real o de demostración)."""

    def list_categories(self) -> List[Category]:
        ...

    def list_active_products(self) -> List[Product]:
        ...


CatalogRead = Tuple[list, bool]
