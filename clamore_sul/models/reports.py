# ==============================================================================
# ESTRUCTURAS DE VISTA - Resultados de catálogo y dashboard
# ==============================================================================
# No se persisten: se construyen a partir de las filas leídas y se entregan
# a las plantillas o a la API JSON del panel.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from clamore_sul.models.entities import Category, Product, Sale, money_str


@dataclass
class Catalog:
    """Categorías y productos activos listos para la vitrina."""
    categories: List[Category]
    products: List[Product]
    categories_from_fallback: bool = False
    products_from_fallback: bool = False

    def category_by_id(self, category_id: Optional[str]) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None


@dataclass
class DashboardStats:
    total_visits: int = 0
    unique_visitors: int = 0
    total_sales: int = 0
    total_revenue: Decimal = Decimal('0')
    total_products: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_visits': self.total_visits,
            'unique_visitors': self.unique_visitors,
            'total_sales': self.total_sales,
            'total_revenue': money_str(self.total_revenue),
            'total_products': self.total_products,
        }


@dataclass
class TimeSeriesPoint:
    """Punto de una serie diaria. label es "MM-DD" para el eje X."""
    day: date
    value: Any

    @property
    def label(self) -> str:
        return self.day.strftime('%m-%d')

    def to_dict(self) -> Dict[str, Any]:
        value = money_str(self.value) if isinstance(self.value, Decimal) else self.value
        return {'date': self.day.isoformat(), 'label': self.label, 'value': value}


@dataclass
class CategorySlice:
    category_id: str
    name: str
    value: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {'category_id': self.category_id, 'name': self.name, 'value': money_str(self.value)}


@dataclass
class Dashboard:
    """
    Resultado completo del panel para un rango de fechas.

    uncategorized_revenue: ingresos de ventas sin categoría resoluble.
    Cuentan en stats.total_revenue pero no en category_revenue.
    """
    date_from: date
    date_to: date
    stats: DashboardStats
    visits_by_day: List[TimeSeriesPoint] = field(default_factory=list)
    revenue_by_day: List[TimeSeriesPoint] = field(default_factory=list)
    category_revenue: List[CategorySlice] = field(default_factory=list)
    uncategorized_revenue: Decimal = Decimal('0')
    sales: List[Sale] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Versión JSON para /admin/api/dashboard (ventas del rango; sin productos ni categorías)."""
        return {
            'date_from': self.date_from.isoformat(),
            'date_to': self.date_to.isoformat(),
            'stats': self.stats.to_dict(),
            'visits_by_day': [p.to_dict() for p in self.visits_by_day],
            'revenue_by_day': [p.to_dict() for p in self.revenue_by_day],
            'category_revenue': [s.to_dict() for s in self.category_revenue],
            'uncategorized_revenue': money_str(self.uncategorized_revenue),
            'sales': [s.to_dict() for s in self.sales],
        }
