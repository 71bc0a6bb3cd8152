import pytest

from transport_stats.analytics.dashboard import DashboardAggregator
from transport_stats.domain.models import (
    Bus,
    DashboardStats,
    Driver,
    Parcel,
    User,
    UserRoleCounts,
)


def test_dashboard_counts_fleet_state():
    users = [
        User(estado="conectado"),
        User(estado="Desconectado"),
        User(estado="conectado"),
        User(),
    ]
    buses = [Bus(activo=True), Bus(activo=False), Bus(activo=True)]
    drivers = [Driver(activo=True), Driver(activo=False), Driver()]
    parcels = [
        Parcel(estado="pendiente"),
        Parcel(estado="En Tránsito"),
        Parcel(estado="en_transito"),
        Parcel(estado="entregada"),
        Parcel(estado="devuelto"),
    ]
    sales = [{"precio": "2.5"}, {"precio": 3}, {"precio": "x"}]

    stats = DashboardAggregator().compute(
        users=users, buses=buses, drivers=drivers, parcels=parcels, sales=sales
    )

    assert stats.users_connected == 2
    assert stats.users_disconnected == 1
    assert stats.total_users == 4
    assert stats.buses_active == 2
    assert stats.buses_inactive == 1
    assert stats.drivers_active == 2
    assert stats.parcels.pending == 1
    assert stats.parcels.in_transit == 2
    assert stats.parcels.delivered == 1
    assert stats.total_revenue == pytest.approx(5.5)


def test_dashboard_with_no_data_is_zeroed():
    assert DashboardAggregator().compute() == DashboardStats()


def test_dashboard_counts_users_per_role_with_unknown_as_plain_user():
    users = [
        User(rol="administrador"),
        User(rol="Conductor"),
        User(rol="conductor"),
        User(rol="gerente"),
        User(rol="usuario"),
        User(rol="invitado"),
        User(),
    ]

    roles = DashboardAggregator().compute(users=users).user_roles

    assert roles == UserRoleCounts(administrators=1, drivers=2, users=3, managers=1)
    assert sum(roles.model_dump().values()) == len(users)
