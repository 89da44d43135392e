# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# - AuthError: credenciales inválidas o rol insuficiente (visible al usuario)
# - StoreError: cualquier fallo de lectura/escritura contra el almacenamiento
# - ValidationError: campos requeridos ausentes o con tipo inválido
#
# Los fallos del rastreo de visitas NO usan excepciones propias: se descartan
# dentro de VisitService y nunca llegan al usuario.
# ==============================================================================


class ClamoreError(Exception):
    """Excepción base de la aplicación."""


class AuthError(ClamoreError):
    """Error de autenticación o autorización."""


class InvalidCredentialsError(AuthError):
    """Email o contraseña incorrectos (no revela si el email existe)."""

    def __init__(self, message: str = "Email ou senha inválidos."):
        super().__init__(message)


class AccessDeniedError(AuthError):
    """Usuario autenticado pero sin rol de administrador."""

    def __init__(self, message: str = "Você não tem permissão de administrador."):
        super().__init__(message)


class StoreError(ClamoreError):
    """
    Fallo del almacenamiento (red, HTTP, archivo corrupto).

    El mensaje es el texto crudo del backend: se muestra tal cual al admin.
    """

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status


class ValidationError(ClamoreError):
    """Validación superficial de formularios."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field
