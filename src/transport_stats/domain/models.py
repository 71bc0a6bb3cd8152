"""Domain value objects for sale history and fleet statistics."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transport_stats.utils.coercion import coerce_label

NOT_AVAILABLE = "N/A"


class PaymentMethod(str, Enum):
    """Payment methods recorded at the ticket office."""

    CASH = "cash"
    TRANSFER = "transfer"


_PAYMENT_ALIASES = {
    "cash": PaymentMethod.CASH,
    "efectivo": PaymentMethod.CASH,
    "transfer": PaymentMethod.TRANSFER,
    "transferencia": PaymentMethod.TRANSFER,
}


def normalize_payment_method(value: Any) -> Optional[PaymentMethod]:
    if isinstance(value, PaymentMethod):
        return value
    if not isinstance(value, str):
        return None
    return _PAYMENT_ALIASES.get(value.strip().lower())


class SaleRecord(BaseModel):
    """Immutable snapshot of one historical ticket sale.

    Every field is optional because documents in the store are loosely
    shaped. Label fields are normalized to non-empty strings or ``None``;
    ``price`` keeps the raw stored value and is coerced only when summed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    route_name: Optional[str] = Field(default=None, alias="paradaNombre")
    departure_date: Optional[str] = Field(default=None, alias="fechaSalida")
    departure_time: Optional[str] = Field(default=None, alias="horaSalida")
    payment_method: Optional[PaymentMethod] = Field(default=None, alias="metodoPago")
    vehicle_id: Optional[str] = Field(default=None, alias="numeroBus")
    price: Any = Field(default=None, alias="precio")
    passenger: Optional[str] = Field(default=None, alias="pasajero")
    seat: Optional[str] = Field(default=None, alias="asiento")

    @field_validator(
        "id",
        "route_name",
        "departure_date",
        "departure_time",
        "vehicle_id",
        "passenger",
        "seat",
        mode="before",
    )
    @classmethod
    def normalize_label(cls, value: Any) -> Optional[str]:
        return coerce_label(value)

    @field_validator("payment_method", mode="before")
    @classmethod
    def normalize_payment(cls, value: Any) -> Optional[PaymentMethod]:
        return normalize_payment_method(value)


class RouteCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    count: int = Field(..., ge=0)


class PaymentSplit(BaseModel):
    """Number of sales per payment method (counts, not amounts)."""

    model_config = ConfigDict(frozen=True)

    cash: int = 0
    transfer: int = 0


class VehicleRevenue(BaseModel):
    model_config = ConfigDict(frozen=True)

    vehicle_id: str
    revenue: float


class AggregateStats(BaseModel):
    """Summary statistics derived from a sale-record collection."""

    model_config = ConfigDict(frozen=True)

    top_route: RouteCount = Field(
        default_factory=lambda: RouteCount(name=NOT_AVAILABLE, count=0)
    )
    busiest_day: str = NOT_AVAILABLE
    busiest_hour: str = NOT_AVAILABLE
    payment_split: PaymentSplit = Field(default_factory=PaymentSplit)
    revenue_per_vehicle: Tuple[VehicleRevenue, ...] = Field(default_factory=tuple)
    total_sales: int = 0
    total_revenue: float = 0.0
    average_daily_sales: float = 0.0


class DailySales(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    sales: int
    revenue: float


class HourlySales(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: str
    sales: int


class MonthlySales(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str
    sales: int
    revenue: float


class SalesBreakdown(BaseModel):
    """Chart-ready series computed from the same records as ``AggregateStats``."""

    model_config = ConfigDict(frozen=True)

    routes: Tuple[RouteCount, ...] = Field(default_factory=tuple)
    daily: Tuple[DailySales, ...] = Field(default_factory=tuple)
    hourly: Tuple[HourlySales, ...] = Field(default_factory=tuple)
    monthly: Tuple[MonthlySales, ...] = Field(default_factory=tuple)


# ----------------------------------------------------------------------
# Fleet entities used by the dashboard summary
# ----------------------------------------------------------------------
class BusOrigin(str, Enum):
    LA_ESPERANZA = "la_esperanza"
    TULCAN = "tulcan"


class User(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    email: Optional[str] = None
    nombre: Optional[str] = None
    estado: Optional[str] = None
    rol: Optional[str] = None


class Bus(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    numero: Optional[str] = None
    ruta: Optional[str] = None
    capacidad: Optional[int] = None
    chofer: Optional[str] = None
    activo: bool = False
    origen: Optional[BusOrigin] = None

    @field_validator("numero", "ruta", "chofer", mode="before")
    @classmethod
    def normalize_label(cls, value: Any) -> Optional[str]:
        return coerce_label(value)


class Driver(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    chofer: Optional[str] = None
    placa: Optional[str] = None
    licencia: Optional[str] = None
    activo: Optional[bool] = None


class Parcel(BaseModel):
    """Parcel ("encomienda") shipped on one of the buses."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    codigo_envio: Optional[str] = None
    estado: Optional[str] = None
    numero: Optional[str] = None
    remitente: Optional[str] = None
    destinatario: Optional[str] = None
    precio: Any = None

    @field_validator("numero", "codigo_envio", mode="before")
    @classmethod
    def normalize_label(cls, value: Any) -> Optional[str]:
        return coerce_label(value)


class ParcelStatusCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    pending: int = 0
    in_transit: int = 0
    delivered: int = 0


class UserRoleCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    administrators: int = 0
    drivers: int = 0
    users: int = 0
    managers: int = 0


class DashboardStats(BaseModel):
    """Fleet-wide counters shown on the main dashboard."""

    model_config = ConfigDict(frozen=True)

    users_connected: int = 0
    users_disconnected: int = 0
    total_users: int = 0
    user_roles: UserRoleCounts = Field(default_factory=UserRoleCounts)
    buses_active: int = 0
    buses_inactive: int = 0
    drivers_active: int = 0
    parcels: ParcelStatusCounts = Field(default_factory=ParcelStatusCounts)
    total_revenue: float = 0.0
