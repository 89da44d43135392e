# ==============================================================================
# REPOSITORIO DE USUARIOS Y ROLES
# ==============================================================================
# user_roles: [{user_id, role}, ...]   (un usuario puede tener varios roles)
# users:      [{id, email, password_hash}, ...]   (solo backend local)
#
# En el backend hospedado los usuarios viven en su servicio de autenticación;
# LocalAuthBackend reproduce ese contrato con hashes werkzeug.
# ==============================================================================

from typing import List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from clamore_sul.exceptions import InvalidCredentialsError
from clamore_sul.models import AuthSession, User, UserRole
from clamore_sul.repositories.base import TableRepository


class RoleRepository(TableRepository):
    """Acceso a la tabla user_roles."""

    table = 'user_roles'

    def roles_for(self, user_id: str, role: str = None, token: str = None) -> List[UserRole]:
        """
        Roles de un usuario, opcionalmente filtrados por nombre exacto.

        Returns:
            Lista (vacía si no tiene ninguno)
        """
        filters = {'user_id': user_id}
        if role is not None:
            filters['role'] = role
        rows = self.store.select(self.table, filters=filters, token=token)
        return [UserRole.from_dict(r) for r in rows]

    def grant(self, user_id: str, role: str) -> UserRole:
        if self.roles_for(user_id, role):
            return UserRole(user_id=user_id, role=role)
        return UserRole.from_dict(self.store.insert(self.table, {'user_id': user_id, 'role': role}))


class UserRepository(TableRepository):
    """Acceso a la tabla users (backend local)."""

    table = 'users'

    def get_by_email(self, email: str) -> Optional[User]:
        rows = self.store.select(self.table, filters={'email': (email or '').strip().lower()})
        return User.from_dict(rows[0]) if rows else None

    def create_user(self, email: str, password: str) -> User:
        """
        Crea un usuario con la contraseña hasheada.

        Args:
            email: Email (se guarda en minúsculas)
            password: Contraseña en texto plano (nunca se persiste)
        """
        row = self.store.insert(self.table, {
            'email': email.strip().lower(),
            'password_hash': generate_password_hash(password),
        })
        return User.from_dict(row)


class LocalAuthBackend:
    """
    AuthBackend sobre la tabla users.

    Verificación EXCLUSIVA con check_password_hash. El mismo error para
    email inexistente y contraseña incorrecta.
    """

    def __init__(self, user_repo: UserRepository, session_lifetime: int = 86400):
        self.user_repo = user_repo
        self.session_lifetime = session_lifetime

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        user = self.user_repo.get_by_email(email)
        if not user or not password or not check_password_hash(user.password_hash, password):
            raise InvalidCredentialsError()
        return AuthSession.starting_now(user.id, user.email, self.session_lifetime)

    def sign_out(self, session: AuthSession) -> None:
        # Las sesiones locales viven solo en la cookie firmada
        return None
