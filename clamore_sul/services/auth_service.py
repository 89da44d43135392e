# ==============================================================================
# SERVICIO DE AUTENTICACIÓN - Puerta de acceso al panel
# ==============================================================================
# Centraliza login, sesión, logout y la verificación del rol "admin".
#
# REGLAS CRÍTICAS:
# - Credenciales inválidas -> mismo mensaje exista o no el email
# - Autenticado pero sin rol admin -> la sesión se cierra EN EL ACTO
# - Error consultando roles -> se trata como NO admin (falla cerrada)
# - Cada request al panel vuelve a evaluar sesión y rol (require_admin)
#
# El estado de sesión NO es global: se pasa explícitamente un mapeo
# (session de Flask en las vistas, un dict en los tests).
# ==============================================================================

import logging
import threading
from contextlib import contextmanager
from typing import Callable, List, MutableMapping, Optional

from clamore_sul.exceptions import AccessDeniedError, InvalidCredentialsError, StoreError
from clamore_sul.models import ADMIN_ROLE, AuthEvent, AuthSession
from clamore_sul.repositories.user_repository import RoleRepository


logger = logging.getLogger(__name__)

# Clave bajo la cual se guarda la sesión dentro del estado
SESSION_KEY = 'auth'

AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class AuthService:
    """
    Servicio de autenticación y autorización.

    Responsabilidades:
    - Login por email/contraseña contra el AuthBackend
    - Lectura/expiración/cierre de la sesión
    - Verificación de rol admin (existencia de fila en user_roles)
    - Notificar cambios de sesión a los suscriptores
    """

    def __init__(self, auth_backend, role_repo: RoleRepository):
        """
        Args:
            auth_backend: LocalAuthBackend o RestAuthBackend
            role_repo: Repositorio de user_roles
        """
        self.auth_backend = auth_backend
        self.role_repo = role_repo
        self._listeners: List[AuthListener] = []
        self._listeners_lock = threading.Lock()

    # =========================================================================
    # SUSCRIPCIONES A CAMBIOS DE SESIÓN
    # =========================================================================

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """
        Registra un listener de eventos de sesión.

        Returns:
            Función que cancela la suscripción (idempotente)
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def subscription(self, listener: AuthListener):
        """Suscripción con cancelación garantizada al salir del bloque."""
        unsubscribe = self.subscribe(listener)
        try:
            yield unsubscribe
        finally:
            unsubscribe()

    @property
    def listener_count(self) -> int:
        with self._listeners_lock:
            return len(self._listeners)

    def _emit(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                # Un listener roto no debe impedir el login/logout
                logger.exception("Listener de sessão falhou para %s", event.value)

    # =========================================================================
    # SESIÓN
    # =========================================================================

    def sign_in(self, state: MutableMapping, email: str, password: str) -> AuthSession:
        """
        Autentica y guarda la sesión en `state`.

        Raises:
            InvalidCredentialsError: Email/contraseña incorrectos o vacíos
            StoreError: Backend inaccesible
        """
        email = (email or '').strip()
        if not email or not password:
            raise InvalidCredentialsError()
        session = self.auth_backend.sign_in_with_password(email, password)
        state[SESSION_KEY] = session.to_dict()
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def get_session(self, state: MutableMapping) -> Optional[AuthSession]:
        """
        Sesión actual o None. Una sesión vencida se elimina y se notifica.
        """
        raw = state.get(SESSION_KEY)
        if not raw:
            return None
        try:
            session = AuthSession.from_dict(raw)
        except (TypeError, AttributeError):
            state.pop(SESSION_KEY, None)
            return None
        if session.is_expired():
            state.pop(SESSION_KEY, None)
            self._emit(AuthEvent.SESSION_EXPIRED, session)
            return None
        return session

    def sign_out(self, state: MutableMapping, event: AuthEvent = AuthEvent.SIGNED_OUT) -> None:
        """
        Cierra la sesión. El estado local se limpia aunque el backend falle.
        """
        raw = state.pop(SESSION_KEY, None)
        if not raw:
            return
        session = AuthSession.from_dict(raw)
        try:
            self.auth_backend.sign_out(session)
        except StoreError as e:
            logger.warning("Logout remoto falhou para %s: %s", session.email, e)
        self._emit(event, session)

    # =========================================================================
    # ROLES
    # =========================================================================

    def is_admin(self, user_id: str, token: str = None) -> bool:
        """
        True si existe al menos una fila user_roles con role == "admin".

        Cualquier error del almacenamiento -> False (falla cerrada).
        """
        if not user_id:
            return False
        try:
            roles = self.role_repo.roles_for(user_id, ADMIN_ROLE, token=token)
        except StoreError as e:
            logger.warning("Consulta de papéis falhou para %s: %s", user_id, e)
            return False
        return any(r.role == ADMIN_ROLE for r in roles)

    def admin_sign_in(self, state: MutableMapping, email: str, password: str) -> AuthSession:
        """
        Login al panel: credenciales + rol admin.

        Raises:
            InvalidCredentialsError: Credenciales incorrectas
            AccessDeniedError: Autenticado sin rol admin (sesión ya cerrada)
        """
        session = self.sign_in(state, email, password)
        if not self.is_admin(session.user_id, session.access_token):
            self.sign_out(state, AuthEvent.ACCESS_REVOKED)
            raise AccessDeniedError()
        return session

    def require_admin(self, state: MutableMapping) -> Optional[AuthSession]:
        """
        Reevalúa sesión y rol. Si el rol ya no está, cierra la sesión.

        Returns:
            La sesión admin vigente o None (el llamador redirige al login)
        """
        session = self.get_session(state)
        if session is None:
            return None
        if not self.is_admin(session.user_id, session.access_token):
            self.sign_out(state, AuthEvent.ACCESS_REVOKED)
            return None
        return session
