# ==============================================================================
# SERVICIO DE PANEL - Agregación de visitas y ventas
# ==============================================================================
# Calcula los indicadores del panel para un rango de fechas inclusivo:
#   [fecha_inicio 00:00:00, fecha_fin 23:59:59] en UTC
#
# LECTURAS: visitas, ventas, productos y categorías se piden EN PARALELO.
# Si cualquiera falla, todo el lote falla: nunca se publica un panel parcial.
#
# INVARIANTES:
# - total_revenue == suma de revenue_by_day
# - total_visits == suma de visits_by_day
# - unique_visitors <= total_visits
# - category_revenue solo incluye categorías con valor > 0
# ==============================================================================

import calendar
import threading
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Dict, Optional, Sequence, Tuple

from clamore_sul.exceptions import ValidationError
from clamore_sul.models import (
    Category,
    CategorySlice,
    Dashboard,
    DashboardStats,
    Product,
    Sale,
    TimeSeriesPoint,
    Visit,
    parse_timestamp,
)
from clamore_sul.performance_logger import profile_function
from clamore_sul.repositories.category_repository import CategoryRepository
from clamore_sul.repositories.product_repository import ProductRepository
from clamore_sul.repositories.sale_repository import SaleRepository
from clamore_sul.repositories.visit_repository import VisitRepository


DATE_FORMAT = '%Y-%m-%d'


# ==============================================================================
# RANGO DE FECHAS
# ==============================================================================

def day_bounds(date_from: date, date_to: date) -> Tuple[datetime, datetime]:
    """
    Convierte un rango de días a instantes UTC.

    Returns:
        (date_from 00:00:00, date_to 23:59:59), ambos inclusivos
    """
    start = datetime.combine(date_from, time(0, 0, 0), tzinfo=timezone.utc)
    end = datetime.combine(date_to, time(23, 59, 59), tzinfo=timezone.utc)
    return start, end


def _one_month_before(day: date) -> date:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def default_range(today: date = None) -> Tuple[date, date]:
    """Rango por defecto del panel: del mismo día del mes anterior hasta hoy."""
    today = today or datetime.now(timezone.utc).date()
    return _one_month_before(today), today


def parse_date_range(raw_from: Optional[str], raw_to: Optional[str],
                     today: date = None) -> Tuple[date, date]:
    """
    Parsea los parámetros ?de=YYYY-MM-DD&ate=YYYY-MM-DD.

    Un parámetro ausente toma el valor del rango por defecto.

    Raises:
        ValidationError: Formato inválido o inicio posterior al fin
    """
    default_from, default_to = default_range(today)
    try:
        date_from = datetime.strptime(raw_from, DATE_FORMAT).date() if raw_from else default_from
        date_to = datetime.strptime(raw_to, DATE_FORMAT).date() if raw_to else default_to
    except ValueError as e:
        raise ValidationError("Data inválida. Use o formato AAAA-MM-DD.", field='date') from e
    if date_from > date_to:
        raise ValidationError("A data inicial deve ser anterior ou igual à data final.", field='date')
    return date_from, date_to


# ==============================================================================
# AGREGACIÓN (pura)
# ==============================================================================

def _day_of(timestamp: Optional[str]) -> Optional[date]:
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return None
    return parsed.astimezone(timezone.utc).date()


def aggregate(visits: Sequence[Visit], sales: Sequence[Sale],
              products: Sequence[Product], categories: Sequence[Category]):
    """
    Reduce las filas leídas a los indicadores del panel.

    Returns:
        Tupla (stats, visits_by_day, revenue_by_day, category_revenue,
               uncategorized_revenue)
    """
    # Visitas
    visits_per_day = Counter()
    visitors = set()
    for visit in visits:
        visitors.add(visit.visitor_id)
        day = _day_of(visit.created_at)
        if day is not None:
            visits_per_day[day] += 1

    # Ventas
    revenue_per_day: Dict[date, Decimal] = defaultdict(lambda: Decimal('0'))
    total_revenue = Decimal('0')
    for sale in sales:
        total_revenue += sale.total
        day = _day_of(sale.sale_date)
        if day is not None:
            revenue_per_day[day] += sale.total

    # Ingresos por categoría vía producto -> categoría
    product_category = {p.id: p.category_id for p in products}
    per_category: Dict[str, Decimal] = {c.id: Decimal('0') for c in categories}
    uncategorized = Decimal('0')
    for sale in sales:
        category_id = product_category.get(sale.product_id) if sale.product_id else None
        if category_id in per_category:
            per_category[category_id] += sale.total
        else:
            uncategorized += sale.total

    stats = DashboardStats(
        total_visits=len(visits),
        unique_visitors=len(visitors),
        total_sales=len(sales),
        total_revenue=total_revenue,
        total_products=len(products),
    )
    visits_by_day = [TimeSeriesPoint(day, count) for day, count in sorted(visits_per_day.items())]
    revenue_by_day = [TimeSeriesPoint(day, value) for day, value in sorted(revenue_per_day.items())]
    category_revenue = [
        CategorySlice(category_id=c.id, name=c.name, value=per_category[c.id])
        for c in categories
        if per_category[c.id] > 0
    ]
    return stats, visits_by_day, revenue_by_day, category_revenue, uncategorized


# ==============================================================================
# SERVICIO
# ==============================================================================

class DashboardService:
    """
    Lecturas concurrentes + agregación del panel.

    Responsabilidades:
    - Pedir las 4 tablas en paralelo (fan-out) y esperar a todas (fan-in)
    - Fallar en bloque si cualquiera de las lecturas falla
    - Construir el Dashboard completo
    """

    def __init__(self, visit_repo: VisitRepository, sale_repo: SaleRepository,
                 product_repo: ProductRepository, category_repo: CategoryRepository,
                 max_workers: int = 4):
        self.visit_repo = visit_repo
        self.sale_repo = sale_repo
        self.product_repo = product_repo
        self.category_repo = category_repo
        self.max_workers = max_workers

    def _fetch_all(self, start: datetime, end: datetime, token: str = None):
        tasks = {
            'visits': lambda: self.visit_repo.list_between(start, end, token=token),
            'sales': lambda: self.sale_repo.list_between(start, end, token=token),
            'products': lambda: self.product_repo.list_all(token=token),
            'categories': lambda: self.category_repo.list_ordered(token=token),
        }
        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix='dashboard') as pool:
            futures = {name: pool.submit(task) for name, task in tasks.items()}
            wait(futures.values())

        # Todo o nada: el primer error aborta el lote completo
        for future in futures.values():
            error = future.exception()
            if error is not None:
                raise error
        return {name: future.result() for name, future in futures.items()}

    @profile_function(name="Calcular panel")
    def compute_dashboard(self, date_from: date, date_to: date, token: str = None) -> Dashboard:
        """
        Panel completo para el rango [date_from, date_to].

        Args:
            date_from: Primer día (inclusivo)
            date_to: Último día (inclusivo)
            token: Token del admin (backend hospedado)

        Raises:
            ValidationError: date_from > date_to
            StoreError: Cualquiera de las lecturas falló
        """
        if date_from > date_to:
            raise ValidationError("A data inicial deve ser anterior ou igual à data final.", field='date')

        start, end = day_bounds(date_from, date_to)
        rows = self._fetch_all(start, end, token=token)

        stats, visits_by_day, revenue_by_day, category_revenue, uncategorized = aggregate(
            rows['visits'], rows['sales'], rows['products'], rows['categories']
        )
        return Dashboard(
            date_from=date_from,
            date_to=date_to,
            stats=stats,
            visits_by_day=visits_by_day,
            revenue_by_day=revenue_by_day,
            category_revenue=category_revenue,
            uncategorized_revenue=uncategorized,
            sales=rows['sales'],
            products=rows['products'],
            categories=rows['categories'],
        )


class DashboardLoader:
    """
    Guarda de generaciones para refrescos del panel.

    Cada refresco de un mismo visor toma una generación nueva; solo el
    resultado de la generación más reciente se publica. Un resultado que
    termina después de que empezó otro refresco se reporta como obsoleto.
    """

    def __init__(self, service: DashboardService):
        self.service = service
        self._generations: Dict[str, int] = defaultdict(int)
        self._published: Dict[str, Dashboard] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> int:
        """Abre una generación nueva para `key` y la retorna."""
        with self._lock:
            self._generations[key] += 1
            return self._generations[key]

    def is_current(self, key: str, generation: int) -> bool:
        with self._lock:
            return self._generations[key] == generation

    def publish(self, key: str, generation: int, dashboard: Dashboard) -> bool:
        """
        Publica el resultado si su generación sigue siendo la última.

        Returns:
            True si se publicó, False si era obsoleto (se descarta)
        """
        with self._lock:
            if self._generations[key] != generation:
                return False
            self._published[key] = dashboard
            return True

    def latest(self, key: str) -> Optional[Dashboard]:
        with self._lock:
            return self._published.get(key)

    def refresh(self, key: str, date_from: date, date_to: date,
                token: str = None) -> Tuple[Dashboard, int, bool]:
        """
        Calcula el panel bajo una generación nueva.

        Returns:
            (dashboard, generación, es_actual)
        """
        generation = self.begin(key)
        dashboard = self.service.compute_dashboard(date_from, date_to, token=token)
        current = self.publish(key, generation, dashboard)
        return dashboard, generation, current


__all__ = [
    'DashboardService',
    'DashboardLoader',
    'aggregate',
    'day_bounds',
    'default_range',
    'parse_date_range',
]
