# ==============================================================================
# PROFILING - Tiempos de rutas y de funciones del panel
# ==============================================================================
# Escribe bloques de texto legibles en <logs_dir>/:
#   performance.log     -> una entrada por request (excepto /static)
#   slow_routes.log     -> requests que superan SLOW_MS / CRITICAL_MS
#   slow_functions.log  -> llamadas lentas y reportes de `flask perf-report`
#
# Se controla con CLAMORE_ENABLE_PROFILING (config.py). El decorador queda
# aplicado al importar, pero consulta el estado en cada llamada.
# ==============================================================================

import logging
import os
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from functools import wraps
from typing import Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)

# Umbrales en milisegundos
SLOW_MS = 300
CRITICAL_MS = 700

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_FUNCTIONS_LOG = 'slow_functions.log'

SEPARATOR = '─' * 40

_state = {
    'enabled': False,
    'logs_dir': os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs'),
}

# Acción legible por "MÉTODO regla"
ACTION_NAMES = {
    'GET /': 'Ver inicio',
    'GET /catalogo': 'Ver catálogo',
    'POST /catalogo/produtos': 'Alta rápida de producto',
    'GET /admin/login': 'Ver login',
    'POST /admin/login': 'Iniciar sesión',
    'POST /admin/logout': 'Cerrar sesión',
    'GET /admin': 'Ver panel',
    'GET /admin/api/dashboard': 'Refrescar panel',
    'POST /admin/produtos': 'Crear producto',
    'POST /admin/produtos/<product_id>': 'Editar producto',
    'POST /admin/produtos/<product_id>/excluir': 'Eliminar producto',
    'POST /admin/vendas': 'Registrar venta',
}


@dataclass
class FunctionStats:
    """Acumulado de una función perfilada."""
    calls: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0

    def add(self, elapsed_ms: float) -> None:
        self.calls += 1
        self.total_ms += elapsed_ms
        self.max_ms = max(self.max_ms, elapsed_ms)


_stats: Dict[str, FunctionStats] = {}
_stats_lock = threading.Lock()
_file_lock = threading.Lock()


def configure(enabled: bool, logs_dir: str = None) -> None:
    """
    Activa o desactiva el profiling.

    Args:
        enabled: Estado del profiling
        logs_dir: Carpeta de los .log (se crea si hace falta)
    """
    _state['enabled'] = bool(enabled)
    if logs_dir:
        _state['logs_dir'] = logs_dir
    if _state['enabled']:
        os.makedirs(_state['logs_dir'], exist_ok=True)


def is_enabled() -> bool:
    return _state['enabled']


def log_path(filename: str) -> str:
    return os.path.join(_state['logs_dir'], filename)


# ==============================================================================
# ESCRITURA
# ==============================================================================

def _now() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _entry(title: str, lines: List[Tuple[str, str]]) -> str:
    body = '\n'.join(f'{label}: {value}' for label, value in lines)
    return f'\n[{title}] {_now()}\n{SEPARATOR}\n{body}\n'


def _append(filename: str, text: str) -> None:
    try:
        with _file_lock, open(log_path(filename), 'a', encoding='utf-8') as f:
            f.write(text)
    except OSError as e:
        # Un disco lleno no tumba la request
        logger.debug("No se pudo escribir %s: %s", filename, e)


def action_name(method: str, path: str, rule: Optional[str] = None) -> str:
    """Nombre legible: primero por path exacto, luego por regla de Flask."""
    for key in (f'{method} {path}', f'{method} {rule}' if rule else None):
        if key in ACTION_NAMES:
            return ACTION_NAMES[key]
    return f'{method} {path}'


def _severity(elapsed_ms: float) -> Optional[str]:
    if elapsed_ms >= CRITICAL_MS:
        return 'CRÍTICO'
    if elapsed_ms >= SLOW_MS:
        return 'LENTO'
    return None


# ==============================================================================
# RUTAS
# ==============================================================================

def record_request(method: str, path: str, rule: Optional[str], elapsed_ms: float,
                   user: Optional[str] = None) -> None:
    """Anota una request en performance.log y, si fue lenta, en slow_routes.log."""
    if not is_enabled():
        return
    lines = [
        ('Acción', action_name(method, path, rule)),
        ('Usuario', user or 'anónimo'),
        ('Ruta', f'{method} {path}'),
        ('Tiempo', f'{elapsed_ms:.0f} ms'),
    ]
    _append(PERFORMANCE_LOG, _entry('REQUEST', lines))

    severity = _severity(elapsed_ms)
    if severity:
        _append(SLOW_ROUTES_LOG, _entry(f'RUTA {severity}', lines))


def init_profiling(app) -> None:
    """Registra los hooks de tiempo en la app (no hace nada si está apagado)."""
    if not is_enabled():
        return

    from flask import g, request, session

    @app.before_request
    def _start_clock():
        g.profiling_started = time.perf_counter()

    @app.after_request
    def _stop_clock(response):
        started = getattr(g, 'profiling_started', None)
        if started is None or request.path.startswith('/static'):
            return response
        elapsed_ms = (time.perf_counter() - started) * 1000
        rule = str(request.url_rule) if request.url_rule else None
        user = (session.get('auth') or {}).get('email')
        record_request(request.method, request.path, rule, elapsed_ms, user)
        return response


# ==============================================================================
# FUNCIONES
# ==============================================================================

def profile_function(func=None, name=None):
    """
    Mide cada llamada de la función decorada.

    Uso:
        @profile_function(name="Calcular panel")
        def compute_dashboard(...):
            ...

    Las llamadas lentas se anotan en slow_functions.log al momento.
    """
    def decorator(fn):
        label = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not is_enabled():
                return fn(*args, **kwargs)
            started = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - started) * 1000
                with _stats_lock:
                    _stats.setdefault(label, FunctionStats()).add(elapsed_ms)
                severity = _severity(elapsed_ms)
                if severity:
                    _append(SLOW_FUNCTIONS_LOG, _entry(f'FUNCIÓN {severity}', [
                        ('Función', label),
                        ('Tiempo', f'{elapsed_ms:.0f} ms'),
                    ]))

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


def function_stats() -> Dict[str, FunctionStats]:
    """Copia de los acumulados actuales."""
    with _stats_lock:
        return {label: FunctionStats(s.calls, s.total_ms, s.max_ms) for label, s in _stats.items()}


def build_report() -> str:
    """
    Reporte de funciones perfiladas, la de mayor promedio primero.

    Returns:
        Texto del reporte ('' si todavía no hay llamadas medidas)
    """
    stats = sorted(function_stats().items(), key=lambda item: item[1].avg_ms, reverse=True)
    if not stats:
        return ''
    blocks = []
    for label, s in stats:
        flag = _severity(s.avg_ms) or ('PICOS' if _severity(s.max_ms) else '')
        blocks.append(
            f"{label}{f' [{flag}]' if flag else ''}\n"
            f"  Llamadas: {s.calls}\n"
            f"  Promedio: {s.avg_ms:.0f} ms\n"
            f"  Máximo:   {s.max_ms:.0f} ms\n"
        )
    return f"\nREPORTE DE FUNCIONES - {_now()}\n{'═' * 40}\n" + '\n'.join(blocks)


def write_report() -> str:
    """Agrega el reporte a slow_functions.log y lo retorna."""
    report = build_report()
    if report:
        _append(SLOW_FUNCTIONS_LOG, report)
    return report


def clear_stats() -> None:
    with _stats_lock:
        _stats.clear()


__all__ = [
    'configure',
    'is_enabled',
    'init_profiling',
    'profile_function',
    'function_stats',
    'build_report',
    'write_report',
    'clear_stats',
]
