# ==============================================================================
# SERVICIO DE VISITAS - Rastreo anónimo de páginas públicas
# ==============================================================================
# Una fila en site_visits por cada página pública servida.
# El visitor_id es un UUID persistido del lado del cliente (cookie propia),
# independiente de la sesión de login.
#
# Best effort: cualquier fallo se descarta. Nunca se muestra ni se reintenta.
# ==============================================================================

import logging
import uuid
from typing import MutableMapping, Optional

from clamore_sul.repositories.visit_repository import VisitRepository


logger = logging.getLogger(__name__)

VISITOR_KEY = 'visitor_id'


class VisitService:
    """Identificador de visitante y registro de visitas."""

    def __init__(self, visit_repo: VisitRepository):
        self.visit_repo = visit_repo

    @staticmethod
    def ensure_visitor_id(storage: MutableMapping) -> str:
        """
        Lee el visitor_id persistido; si no existe, genera uno nuevo y lo guarda.

        Args:
            storage: Almacenamiento del cliente (cookies, dict en tests)

        Returns:
            El identificador (el mismo mientras el almacenamiento no se limpie)
        """
        visitor_id = storage.get(VISITOR_KEY)
        if not visitor_id:
            visitor_id = str(uuid.uuid4())
            storage[VISITOR_KEY] = visitor_id
        return visitor_id

    def record_visit(self, visitor_id: str, page: str,
                     referrer: Optional[str] = None, user_agent: str = '') -> None:
        """Registra la visita. Los errores se descartan en silencio."""
        try:
            self.visit_repo.append({
                'visitor_id': visitor_id,
                'page': page,
                'referrer': referrer or None,
                'user_agent': user_agent or '',
            })
        except Exception as e:
            logger.debug("Registro de visita descartado (%s): %s", page, e)
