"""Fleet-wide dashboard counters."""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional

from transport_stats.analytics.aggregator import normalize_records
from transport_stats.domain.models import (
    Bus,
    DashboardStats,
    Driver,
    Parcel,
    ParcelStatusCounts,
    User,
    UserRoleCounts,
)
from transport_stats.utils.coercion import coerce_price

_PENDING = {"pendiente"}
_IN_TRANSIT = {"en transito", "en tránsito", "en_transito"}
_DELIVERED = {"entregado", "entregada"}
_ROLES = {"administrador", "conductor", "usuario", "gerente"}
_DEFAULT_ROLE = "usuario"


def _status(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _role(value: Optional[str]) -> str:
    role = _status(value)
    return role if role in _ROLES else _DEFAULT_ROLE


class DashboardAggregator:
    """Counts users, buses, drivers and parcels by state."""

    def compute(
        self,
        *,
        users: Iterable[User] = (),
        buses: Iterable[Bus] = (),
        drivers: Iterable[Driver] = (),
        parcels: Iterable[Parcel] = (),
        sales: Optional[Iterable[Any]] = None,
    ) -> DashboardStats:
        users = list(users)
        buses = list(buses)
        user_states = [_status(user.estado) for user in users]
        parcel_states = [_status(parcel.estado) for parcel in parcels]
        roles = [_role(user.rol) for user in users]
        return DashboardStats(
            users_connected=user_states.count("conectado"),
            users_disconnected=user_states.count("desconectado"),
            total_users=len(users),
            user_roles=UserRoleCounts(
                administrators=roles.count("administrador"),
                drivers=roles.count("conductor"),
                users=roles.count("usuario"),
                managers=roles.count("gerente"),
            ),
            buses_active=sum(1 for bus in buses if bus.activo),
            buses_inactive=sum(1 for bus in buses if not bus.activo),
            # Drivers without an explicit flag are considered active.
            drivers_active=sum(1 for driver in drivers if driver.activo is not False),
            parcels=ParcelStatusCounts(
                pending=sum(1 for state in parcel_states if state in _PENDING),
                in_transit=sum(1 for state in parcel_states if state in _IN_TRANSIT),
                delivered=sum(1 for state in parcel_states if state in _DELIVERED),
            ),
            total_revenue=math.fsum(
                coerce_price(record.price) for record in normalize_records(sales)
            ),
        )
