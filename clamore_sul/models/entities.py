# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa una fila de una tabla del almacenamiento:
#   categories, products, sales, site_visits, user_roles (+ users en local)
# Diseñadas para ser independientes del backend (JSON local o REST hospedado).
# ==============================================================================

import unicodedata
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional


CENTS = Decimal('0.01')

# Etiqueta mostrada cuando el producto apunta a una categoría inexistente
FALLBACK_CATEGORY_LABEL = 'Cosmético'

ADMIN_ROLE = 'admin'


# ==============================================================================
# HELPERS DE TIPOS
# ==============================================================================

def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convierte un valor (str, int, float, Decimal) a Decimal.

    Los floats pasan por str() para no arrastrar error binario
    (10.5 -> Decimal('10.5'), no Decimal('10.4999...')).

    Returns:
        Decimal o None si el valor está vacío
    """
    if value is None or value == '':
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Valor decimal inválido: {value!r}") from e


def to_money(value: Any) -> Optional[Decimal]:
    """Decimal redondeado a centavos (2 decimales)."""
    dec = to_decimal(value)
    if dec is None:
        return None
    if not dec.is_finite():
        raise ValueError(f"Valor monetário inválido: {value!r}")
    try:
        return dec.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Valor monetário inválido: {value!r}") from e


def money_str(value: Optional[Decimal]) -> Optional[str]:
    """Serializa dinero como texto decimal ("31.50") para persistencia."""
    if value is None:
        return None
    return str(to_money(value))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parsea un timestamp ISO-8601.
    Sin zona horaria se asume UTC. Retorna None si no puede parsear.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        try:
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _strip_accents(text: str) -> str:
    normalized = unicodedata.normalize('NFKD', text)
    return ''.join(c for c in normalized if not unicodedata.combining(c))


# ==============================================================================
# ENUMERACIONES
# ==============================================================================

DEFAULT_CATEGORY_ICON = 'package'


class KnownCategory(Enum):
    """
    Categorías conocidas del catálogo, cada una con su ícono.

    Cualquier slug fuera de esta lista usa DEFAULT_CATEGORY_ICON.
    """
    TRATAMENTO = ('tratamento', 'sparkles')
    COLORACAO = ('coloracao', 'palette')
    FINALIZACAO = ('finalizacao', 'wind')
    ACESSORIOS = ('acessorios', 'package')

    def __init__(self, slug: str, icon: str):
        self.slug = slug
        self.icon = icon

    @classmethod
    def from_slug(cls, slug: Optional[str]) -> Optional['KnownCategory']:
        """Busca por slug ignorando mayúsculas y acentos ("finalização" == "finalizacao")."""
        if not slug:
            return None
        key = _strip_accents(slug).strip().lower()
        for member in cls:
            if member.slug == key:
                return member
        return None


def icon_for_slug(slug: Optional[str]) -> str:
    known = KnownCategory.from_slug(slug)
    return known.icon if known else DEFAULT_CATEGORY_ICON


class SaleStatus(str, Enum):
    """Estados posibles de una venta."""
    CONCLUIDA = 'concluida'    # Estado por defecto al registrar
    PENDENTE = 'pendente'
    CANCELADA = 'cancelada'


class AuthEvent(str, Enum):
    """Transiciones de sesión notificadas a los suscriptores."""
    SIGNED_IN = 'SIGNED_IN'
    SIGNED_OUT = 'SIGNED_OUT'
    SESSION_EXPIRED = 'SESSION_EXPIRED'
    ACCESS_REVOKED = 'ACCESS_REVOKED'


# ==============================================================================
# CATÁLOGO
# ==============================================================================

@dataclass
class Category:
    """
    Categoría de productos.

    Attributes:
        id: Identificador opaco
        name: Nombre visible
        slug: Clave usada para elegir el ícono
        description: Descripción opcional
        sort_order: Orden de aparición
    """
    id: str
    name: str
    slug: str = ''
    description: Optional[str] = None
    sort_order: int = 0

    @property
    def icon(self) -> str:
        return icon_for_slug(self.slug)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'sort_order': self.sort_order,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name') or '',
            slug=data.get('slug') or '',
            description=data.get('description'),
            sort_order=int(data.get('sort_order') or 0),
        )


@dataclass
class Product:
    """
    Producto del catálogo.

    price=None significa "precio a consultar".
    is_active=False lo retira de la vitrina sin borrarlo.
    """
    id: str
    name: str
    description: Optional[str] = None
    price: Optional[Decimal] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia (precio como texto decimal)."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': money_str(self.price),
            'image_url': self.image_url,
            'category_id': self.category_id,
            'is_active': self.is_active,
            'sort_order': self.sort_order,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        category_id = data.get('category_id')
        is_active = data.get('is_active')
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name') or '',
            description=data.get('description'),
            price=to_decimal(data.get('price')),
            image_url=data.get('image_url'),
            category_id=str(category_id) if category_id is not None else None,
            # NULL en la tabla se interpreta como activo
            is_active=True if is_active is None else bool(is_active),
            sort_order=int(data.get('sort_order') or 0),
            created_at=data.get('created_at'),
        )


# ==============================================================================
# VENTAS Y VISITAS
# ==============================================================================

@dataclass
class Sale:
    """
    Venta registrada desde el panel.

    total = quantity * unit_price se calcula UNA vez al crear y se persiste;
    nunca se vuelve a derivar al leer.
    """
    id: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    customer_name: Optional[str] = None
    product_id: Optional[str] = None
    status: str = SaleStatus.CONCLUIDA.value
    notes: Optional[str] = None
    sale_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customer_name': self.customer_name,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'unit_price': money_str(self.unit_price),
            'total': money_str(self.total),
            'status': self.status,
            'notes': self.notes,
            'sale_date': self.sale_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        product_id = data.get('product_id')
        return cls(
            id=str(data.get('id', '')),
            customer_name=data.get('customer_name'),
            product_id=str(product_id) if product_id is not None else None,
            quantity=int(data.get('quantity') or 0),
            unit_price=to_decimal(data.get('unit_price')) or Decimal('0'),
            total=to_decimal(data.get('total')) or Decimal('0'),
            status=data.get('status') or SaleStatus.CONCLUIDA.value,
            notes=data.get('notes'),
            sale_date=data.get('sale_date'),
        )


@dataclass
class Visit:
    """Visita a una página pública. Solo se agrega, nunca se edita."""
    id: str
    visitor_id: str
    page: str
    referrer: Optional[str] = None
    user_agent: str = ''
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'visitor_id': self.visitor_id,
            'page': self.page,
            'referrer': self.referrer,
            'user_agent': self.user_agent,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Visit':
        return cls(
            id=str(data.get('id', '')),
            visitor_id=data.get('visitor_id') or '',
            page=data.get('page') or '',
            referrer=data.get('referrer'),
            user_agent=data.get('user_agent') or '',
            created_at=data.get('created_at'),
        )


# ==============================================================================
# USUARIOS, ROLES Y SESIÓN
# ==============================================================================

@dataclass
class User:
    """
    Usuario del backend local (en el backend hospedado vive fuera de la app).

    Attributes:
        id: Identificador del usuario
        email: Email de login (único, en minúsculas)
        password_hash: Hash werkzeug (nunca texto plano)
    """
    id: str
    email: str
    password_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'email': self.email, 'password_hash': self.password_hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=str(data.get('id', '')),
            email=(data.get('email') or '').lower(),
            password_hash=data.get('password_hash') or '',
        )


@dataclass
class UserRole:
    """Fila de user_roles. Un usuario puede tener cero o más roles."""
    user_id: str
    role: str

    def to_dict(self) -> Dict[str, Any]:
        return {'user_id': self.user_id, 'role': self.role}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserRole':
        return cls(user_id=str(data.get('user_id', '')), role=data.get('role') or '')


@dataclass
class AuthSession:
    """
    Sesión autenticada.

    access_token solo se usa con el backend hospedado (RLS por usuario).
    """
    user_id: str
    email: str
    access_token: Optional[str] = None
    expires_at: Optional[str] = None

    def is_expired(self, now: datetime = None) -> bool:
        expires = parse_timestamp(self.expires_at)
        if expires is None:
            return False
        return (now or utc_now()) >= expires

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'email': self.email,
            'access_token': self.access_token,
            'expires_at': self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuthSession':
        return cls(
            user_id=str(data.get('user_id', '')),
            email=data.get('email') or '',
            access_token=data.get('access_token'),
            expires_at=data.get('expires_at'),
        )

    @classmethod
    def starting_now(cls, user_id: str, email: str, lifetime_seconds: int,
                     access_token: str = None) -> 'AuthSession':
        expires = utc_now() + timedelta(seconds=lifetime_seconds)
        return cls(user_id=user_id, email=email, access_token=access_token,
                   expires_at=expires.isoformat())
