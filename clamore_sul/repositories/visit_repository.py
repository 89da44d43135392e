# ==============================================================================
# REPOSITORIO DE VISITAS
# ==============================================================================
# Tabla site_visits. Solo inserción: nunca se actualiza ni se borra.
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, List

from clamore_sul.models import Visit
from clamore_sul.repositories.base import TableRepository


class VisitRepository(TableRepository):
    """Acceso a la tabla site_visits."""

    table = 'site_visits'

    def append(self, payload: Dict[str, Any]) -> Visit:
        return Visit.from_dict(self.store.insert(self.table, payload))

    def list_between(self, start: datetime, end: datetime, token: str = None) -> List[Visit]:
        rows = self.store.select(
            self.table,
            gte={'created_at': start},
            lte={'created_at': end},
            token=token,
        )
        return [Visit.from_dict(r) for r in rows]
