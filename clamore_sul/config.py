# ==============================================================================
# CONFIGURACIÓN - Variables de entorno
# ==============================================================================
# Toda la configuración externa vive aquí. En producción se define por
# variables de entorno; en desarrollo se usan valores por defecto seguros.
#
#   export CLAMORE_SECRET_KEY="clave_larga_y_aleatoria"
#   export CLAMORE_STORE_URL="https://<proyecto>.supabase.co"
#   export CLAMORE_STORE_KEY="<clave pública anon>"
# ==============================================================================

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


BASE = os.path.dirname(os.path.abspath(__file__))

_DEFAULT_SECRET = "clamore_sul_dev_secret_key_change_in_production"

logger = logging.getLogger(__name__)


def _env_flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on', 'sim')


@dataclass
class Config:
    """
    Configuración de la aplicación.

    Attributes:
        secret_key: Clave para firmar la cookie de sesión de Flask
        production: Modo producción (exige secret_key definida)
        data_dir: Carpeta del almacenamiento JSON local
        store_url: Endpoint del almacenamiento hospedado (activa backend REST)
        store_key: Clave pública (no secreta) del almacenamiento hospedado
        store_timeout: Timeout HTTP en segundos
        whatsapp_number: Número de contacto usado en los enlaces del catálogo
        logs_dir: Carpeta de logs de rendimiento
        enable_profiling: Activa el profiling de rutas y funciones
        log_level: Nivel de logging
    """
    secret_key: str = _DEFAULT_SECRET
    production: bool = False
    data_dir: str = field(default_factory=lambda: os.path.join(BASE, 'data'))
    store_url: Optional[str] = None
    store_key: Optional[str] = None
    store_timeout: float = 10.0
    whatsapp_number: str = '5547999999999'
    logs_dir: str = field(default_factory=lambda: os.path.join(BASE, 'logs'))
    enable_profiling: bool = True
    log_level: str = 'INFO'
    testing: bool = False

    @property
    def uses_hosted_store(self) -> bool:
        """True si hay que hablar con el almacenamiento hospedado (REST)."""
        return bool(self.store_url)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> 'Config':
        """
        Construye la configuración desde variables de entorno.

        Args:
            environ: Mapeo de variables (por defecto os.environ)

        Returns:
            Config lista para create_app()
        """
        env = os.environ if environ is None else environ

        production = _env_flag(env.get('CLAMORE_PRODUCTION'), False)
        secret = env.get('CLAMORE_SECRET_KEY')
        if production and not secret:
            logger.warning("Modo producción activo sin CLAMORE_SECRET_KEY definida")

        try:
            timeout = float(env.get('CLAMORE_STORE_TIMEOUT') or 10)
        except ValueError:
            timeout = 10.0

        return cls(
            secret_key=secret or _DEFAULT_SECRET,
            production=production,
            data_dir=env.get('CLAMORE_DATA_DIR') or os.path.join(BASE, 'data'),
            store_url=(env.get('CLAMORE_STORE_URL') or '').rstrip('/') or None,
            store_key=env.get('CLAMORE_STORE_KEY') or None,
            store_timeout=timeout,
            whatsapp_number=env.get('CLAMORE_WHATSAPP_NUMBER') or '5547999999999',
            logs_dir=env.get('CLAMORE_LOGS_DIR') or os.path.join(BASE, 'logs'),
            enable_profiling=_env_flag(env.get('CLAMORE_ENABLE_PROFILING'), True),
            log_level=(env.get('CLAMORE_LOG_LEVEL') or 'INFO').upper(),
        )

    def flask_settings(self) -> dict:
        """Claves de app.config derivadas de esta configuración."""
        return {
            'SECRET_KEY': self.secret_key,
            'TESTING': self.testing,
            'SESSION_COOKIE_HTTPONLY': True,
            'SESSION_COOKIE_SECURE': self.production,
            'SESSION_COOKIE_SAMESITE': 'Lax',
            'PERMANENT_SESSION_LIFETIME': 86400,  # 24 horas
            'WHATSAPP_NUMBER': self.whatsapp_number,
        }


def configure_logging(config: Config) -> None:
    """Configura el logging raíz una sola vez."""
    level = getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )
    logging.getLogger('clamore_sul').setLevel(level)
