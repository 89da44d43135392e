import pytest

from clamore_sul import performance_logger
from clamore_sul.app_container import AppContainer
from clamore_sul.config import Config
from clamore_sul.main import create_app


@pytest.fixture
def profiling(tmp_path):
    logs_dir = tmp_path / 'logs'
    performance_logger.configure(True, str(logs_dir))
    performance_logger.clear_stats()
    yield logs_dir
    performance_logger.configure(False)
    performance_logger.clear_stats()


@pytest.fixture
def profiled_app(tmp_path, profiling):
    application = create_app(Config(
        secret_key='test-secret',
        data_dir=str(tmp_path / 'data'),
        logs_dir=str(profiling),
        enable_profiling=True,
        testing=True,
    ))
    yield application
    AppContainer.reset_instance()


# ==============================================================================
# FUNCIONES
# ==============================================================================

def test_profiled_function_accumulates_stats(profiling):
    @performance_logger.profile_function(name='Somar')
    def add(a, b):
        return a + b

    assert add(1, 2) == 3
    add(3, 4)

    stats = performance_logger.function_stats()['Somar']
    assert stats.calls == 2
    assert stats.max_ms >= stats.avg_ms >= 0


def test_disabled_profiling_measures_nothing():
    @performance_logger.profile_function
    def noop():
        return 'ok'

    assert noop() == 'ok'
    assert 'noop' not in performance_logger.function_stats()


def test_report_is_written_to_slow_functions_log(profiling):
    @performance_logger.profile_function(name='Calcular panel')
    def compute():
        return None

    compute()
    report = performance_logger.write_report()

    assert 'REPORTE DE FUNCIONES' in report
    assert 'Calcular panel' in report
    assert 'Llamadas: 1' in report
    content = (profiling / performance_logger.SLOW_FUNCTIONS_LOG).read_text(encoding='utf-8')
    assert 'Calcular panel' in content


def test_empty_report_writes_nothing(profiling):
    assert performance_logger.write_report() == ''
    assert not (profiling / performance_logger.SLOW_FUNCTIONS_LOG).exists()


# ==============================================================================
# RUTAS
# ==============================================================================

def test_fast_request_only_goes_to_performance_log(profiling):
    performance_logger.record_request('GET', '/catalogo', '/catalogo', 12.0)

    content = (profiling / performance_logger.PERFORMANCE_LOG).read_text(encoding='utf-8')
    assert 'Ver catálogo' in content
    assert 'anónimo' in content
    assert not (profiling / performance_logger.SLOW_ROUTES_LOG).exists()


def test_slow_request_is_flagged(profiling):
    performance_logger.record_request('POST', '/admin/produtos/abc', '/admin/produtos/<product_id>',
                                      performance_logger.CRITICAL_MS + 50, user='admin@clamoresul.com.br')

    content = (profiling / performance_logger.SLOW_ROUTES_LOG).read_text(encoding='utf-8')
    assert '[RUTA CRÍTICO]' in content
    assert 'Editar producto' in content
    assert 'admin@clamoresul.com.br' in content


def test_requests_are_logged_but_static_is_skipped(profiled_app, profiling):
    client = profiled_app.test_client()
    client.get('/')
    client.get('/static/style.css')

    content = (profiling / performance_logger.PERFORMANCE_LOG).read_text(encoding='utf-8')
    assert 'Ver inicio' in content
    assert '/static' not in content


# ==============================================================================
# CLI
# ==============================================================================

def test_perf_report_command_requires_profiling(app):
    result = app.test_cli_runner().invoke(args=['perf-report'])
    assert result.exit_code != 0
    assert 'Profiling desativado' in result.output


def test_perf_report_command_without_measurements(profiled_app):
    result = profiled_app.test_cli_runner().invoke(args=['perf-report'])
    assert result.exit_code == 0, result.output
    assert 'Nenhuma função medida ainda.' in result.output


def test_perf_report_command_prints_and_writes_report(profiled_app, profiling):
    @performance_logger.profile_function(name='Listar produtos')
    def list_products():
        return []

    list_products()
    result = profiled_app.test_cli_runner().invoke(args=['perf-report'])

    assert result.exit_code == 0, result.output
    assert 'Listar produtos' in result.output
    content = (profiling / performance_logger.SLOW_FUNCTIONS_LOG).read_text(encoding='utf-8')
    assert 'REPORTE DE FUNCIONES' in content
