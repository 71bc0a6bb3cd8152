import copy
from decimal import Decimal
from fractions import Fraction

import pytest

from transport_stats.analytics.aggregator import HistoryAggregator, compute_stats
from transport_stats.domain.models import (
    AggregateStats,
    PaymentMethod,
    SaleRecord,
    VehicleRevenue,
)


def _record(
    route: str | None = "A",
    date: str | None = "2024-01-01",
    hour: str | None = "08:00",
    method: str | None = "cash",
    vehicle: str | None = "1",
    price: object = 10,
) -> SaleRecord:
    return SaleRecord(
        route_name=route,
        departure_date=date,
        departure_time=hour,
        payment_method=method,
        vehicle_id=vehicle,
        price=price,
    )


@pytest.fixture
def scenario():
    return [
        _record("A", "2024-01-01", "08:00", "cash", "1", 10),
        _record("A", "2024-01-01", "09:00", "transfer", "2", 20),
        _record("B", "2024-01-02", "08:00", "cash", "1", 5),
    ]


def test_compute_stats_reference_scenario(scenario):
    stats = compute_stats(scenario)

    assert stats.top_route.name == "A"
    assert stats.top_route.count == 2
    assert stats.busiest_day == "2024-01-01"
    assert stats.busiest_hour == "08:00"
    assert stats.payment_split.cash == 2
    assert stats.payment_split.transfer == 1
    assert stats.revenue_per_vehicle == (
        VehicleRevenue(vehicle_id="2", revenue=20),
        VehicleRevenue(vehicle_id="1", revenue=15),
    )
    assert stats.total_revenue == 35
    assert stats.total_sales == 3
    assert stats.average_daily_sales == pytest.approx(1.5)


def test_string_prices_are_parsed_and_invalid_ones_count_as_zero():
    records = [_record(price="12.50"), _record(price="abc")]

    stats = compute_stats(records)

    assert stats.total_revenue == pytest.approx(12.5)
    assert stats.total_sales == 2


@pytest.mark.parametrize("price", [None, True, float("nan"), float("inf"), "", [1]])
def test_unusable_prices_contribute_nothing(price):
    stats = compute_stats([_record(price=price), _record(price=3)])

    assert stats.total_revenue == 3
    assert stats.total_sales == 2


def test_integer_price_beyond_float_range_counts_as_zero():
    stats = compute_stats([_record(price=10**400), _record(price=3)])

    assert stats.total_revenue == 3
    assert stats.total_sales == 2


@pytest.mark.parametrize(
    "price", [Decimal("12.50"), Fraction(25, 2), 12.5, " 12.5 "]
)
def test_real_number_prices_are_used_as_is(price):
    stats = compute_stats([_record(vehicle="1", price=price)])

    assert stats.total_revenue == pytest.approx(12.5)
    assert stats.revenue_per_vehicle == (VehicleRevenue(vehicle_id="1", revenue=12.5),)


def test_empty_input_returns_zero_stats():
    stats = compute_stats([])

    assert stats == AggregateStats()
    assert stats.top_route.name == "N/A"
    assert stats.top_route.count == 0
    assert stats.busiest_day == "N/A"
    assert stats.busiest_hour == "N/A"
    assert stats.revenue_per_vehicle == ()
    assert stats.average_daily_sales == 0


@pytest.mark.parametrize("records", [None, 42, "not records", {"paradaNombre": "A"}])
def test_non_sequence_input_is_treated_as_empty(records):
    assert compute_stats(records) == AggregateStats()


def test_ties_resolve_to_first_seen_label():
    records = [
        _record("Tulcan", "2024-02-03", "14:30"),
        _record("Angel", "2024-01-01", "06:00"),
        _record("Angel", "2024-01-01", "06:00"),
        _record("Tulcan", "2024-02-03", "14:30"),
    ]

    stats = compute_stats(records)

    # first-seen wins, not the lexically smallest key
    assert stats.top_route.name == "Tulcan"
    assert stats.busiest_day == "2024-02-03"
    assert stats.busiest_hour == "14:30"


def test_vehicle_revenue_ties_keep_input_order():
    records = [
        _record(vehicle="7", price=5),
        _record(vehicle="3", price=5),
        _record(vehicle="9", price=8),
    ]

    stats = compute_stats(records)

    assert [entry.vehicle_id for entry in stats.revenue_per_vehicle] == ["9", "7", "3"]


def test_missing_fields_only_skip_their_grouping():
    records = [
        _record(route=None, date=None, hour=None, method=None, vehicle=None, price=7),
        _record("B", "2024-03-01", "10:00", "transfer", "4", 3),
    ]

    stats = compute_stats(records)

    assert stats.total_sales == 2
    assert stats.total_revenue == 10
    assert stats.top_route.name == "B"
    assert stats.top_route.count == 1
    assert stats.payment_split.transfer == 1
    assert stats.payment_split.cash == 0
    assert stats.average_daily_sales == 2
    assert stats.revenue_per_vehicle == (VehicleRevenue(vehicle_id="4", revenue=3),)


def test_vehicle_revenue_sums_match_records_with_vehicle():
    records = [
        _record(vehicle="1", price="4.25"),
        _record(vehicle="", price=100),
        _record(vehicle="2", price=1),
        _record(vehicle="1", price="bad"),
    ]

    stats = compute_stats(records)

    assert sum(entry.revenue for entry in stats.revenue_per_vehicle) == pytest.approx(5.25)
    assert stats.total_revenue == pytest.approx(105.25)
    revenues = [entry.revenue for entry in stats.revenue_per_vehicle]
    assert all(a >= b for a, b in zip(revenues, revenues[1:]))


def test_store_documents_and_junk_elements_are_accepted():
    documents = [
        {
            "paradaNombre": "San Gabriel",
            "fechaSalida": "2024-05-01",
            "horaSalida": "07:15",
            "metodoPago": "Efectivo",
            "numeroBus": 12,
            "precio": "2.50",
        },
        {"paradaNombre": "San Gabriel", "metodoPago": "transferencia", "precio": 3},
        None,
        42,
    ]

    stats = compute_stats(documents)

    assert stats.total_sales == 4
    assert stats.total_revenue == pytest.approx(5.5)
    assert stats.top_route.name == "San Gabriel"
    assert stats.top_route.count == 2
    assert stats.payment_split.cash == 1
    assert stats.payment_split.transfer == 1
    assert stats.revenue_per_vehicle[0].vehicle_id == "12"


def test_compute_stats_is_deterministic_and_does_not_mutate_input():
    documents = [
        {"paradaNombre": "A", "fechaSalida": "2024-01-01", "precio": "1.5"},
        {"paradaNombre": "B", "fechaSalida": "2024-01-02", "precio": 2},
    ]
    snapshot = copy.deepcopy(documents)
    aggregator = HistoryAggregator()

    first = aggregator.compute_stats(documents)
    second = aggregator.compute_stats(documents)

    assert first == second
    assert documents == snapshot


def test_permutation_keeps_aggregate_counts(scenario):
    forward = compute_stats(scenario)
    backward = compute_stats(list(reversed(scenario)))

    assert forward.total_sales == backward.total_sales
    assert forward.total_revenue == backward.total_revenue
    assert forward.payment_split == backward.payment_split
    assert forward.top_route.count == backward.top_route.count


def test_accepts_generators(scenario):
    stats = compute_stats(record for record in scenario)

    assert stats.total_sales == 3
    assert stats.payment_split.cash == 2


def test_payment_method_enum_is_normalized():
    record = SaleRecord(metodoPago="TRANSFERENCIA")

    assert record.payment_method is PaymentMethod.TRANSFER
    assert SaleRecord(metodoPago="cheque").payment_method is None
