# ==============================================================================
# APLICACIÓN FLASK - Fábrica, hooks y comandos
# ==============================================================================
# create_app() arma la app completa:
#   - Configuración (config.py) y logging
#   - Profiling de rutas (performance_logger.py)
#   - Contenedor de dependencias (app_container.py)
#   - Blueprints público y admin
#   - Cabeceras de seguridad y token CSRF en las plantillas
#   - Comandos `flask create-admin` (solo backend local) y `flask perf-report`
# ==============================================================================

import atexit

import click
from flask import Flask, request
from flask.cli import with_appcontext

from clamore_sul import performance_logger
from clamore_sul.app_container import AppContainer
from clamore_sul.config import Config, configure_logging
from clamore_sul.models import ADMIN_ROLE, AuthEvent, icon_for_slug
from clamore_sul.performance_logger import init_profiling
from clamore_sul.views import admin_bp, public_bp
from clamore_sul.views.guards import CONTAINER_KEY, generate_csrf_token, get_services


def _auth_event_logger(logger):
    """Listener que deja rastro de cada transición de sesión."""
    def listener(event, auth_session):
        email = auth_session.email if auth_session else '-'
        if event == AuthEvent.ACCESS_REVOKED:
            logger.warning("Sessão %s: %s", event.value, email)
        else:
            logger.info("Sessão %s: %s", event.value, email)
    return listener


def create_app(config: Config = None, store=None, auth_backend=None) -> Flask:
    """
    Construye la aplicación.

    Args:
        config: Configuración (por defecto desde variables de entorno)
        store: TableStore a inyectar (tests)
        auth_backend: AuthBackend a inyectar (tests)

    Returns:
        App Flask lista para servir
    """
    config = config or Config.from_env()
    configure_logging(config)

    app = Flask(__name__)
    app.config.update(config.flask_settings())

    # ═══════════════════════════════════════════════════════════════════════
    # PROFILING
    # ═══════════════════════════════════════════════════════════════════════
    # Mide rendimiento de rutas y funciones. Logs en config.logs_dir
    performance_logger.configure(config.enable_profiling, config.logs_dir)
    init_profiling(app)

    # ═══════════════════════════════════════════════════════════════════════
    # CONTENEDOR DE DEPENDENCIAS
    # ═══════════════════════════════════════════════════════════════════════
    AppContainer.reset_instance()
    container = AppContainer(config, store=store, auth_backend=auth_backend)
    app.extensions[CONTAINER_KEY] = container

    unsubscribe = container.auth_service.subscribe(_auth_event_logger(app.logger))
    atexit.register(unsubscribe)

    app.register_blueprint(public_bp)
    app.register_blueprint(admin_bp)

    _register_hooks(app)
    app.cli.add_command(create_admin_command)
    app.cli.add_command(perf_report_command)

    backend = 'hospedado' if config.uses_hosted_store else f'JSON local ({config.data_dir})'
    app.logger.info("Clamore Sul iniciado com armazenamento %s", backend)
    return app


def _register_hooks(app: Flask) -> None:
    @app.context_processor
    def inject_helpers():
        return {
            'csrf_token': generate_csrf_token(),
            'icon_for_slug': icon_for_slug,
            'whatsapp_number': app.config['WHATSAPP_NUMBER'],
        }

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
        # NOTA: HSTS solo con HTTPS real
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    @app.errorhandler(404)
    def not_found(error):
        return "Página não encontrada", 404


# ═══════════════════════════════════════════════════════════════════════════
# COMANDOS CLI
# ═══════════════════════════════════════════════════════════════════════════

@click.command('create-admin')
@click.argument('email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True,
              help='Senha do novo administrador')
@with_appcontext
def create_admin_command(email, password):
    """Crea un usuario local con rol admin (o concede el rol si ya existe)."""
    services = get_services()
    if services.config.uses_hosted_store:
        raise click.ClickException(
            "Com armazenamento hospedado, crie o usuário no serviço de autenticação "
            "e insira a linha em user_roles."
        )
    if not password:
        raise click.ClickException("A senha não pode ser vazia.")

    user = services.user_repo.get_by_email(email)
    if user is None:
        user = services.user_repo.create_user(email, password)
        click.echo(f"Usuário criado: {user.email}")
    services.role_repo.grant(user.id, ADMIN_ROLE)
    click.echo(f"Papel '{ADMIN_ROLE}' concedido a {user.email}")


@click.command('perf-report')
@with_appcontext
def perf_report_command():
    """Escribe el reporte de funciones perfiladas en slow_functions.log y lo muestra."""
    if not performance_logger.is_enabled():
        raise click.ClickException("Profiling desativado (CLAMORE_ENABLE_PROFILING=0).")
    report = performance_logger.write_report()
    if not report:
        click.echo("Nenhuma função medida ainda.")
        return
    click.echo(report)
