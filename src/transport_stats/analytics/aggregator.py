"""Pure business-logic helpers for sale-history aggregation."""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ValidationError as PydanticValidationError

from transport_stats.domain.interfaces import IHistoryAggregator
from transport_stats.domain.models import (
    NOT_AVAILABLE,
    AggregateStats,
    DailySales,
    HourlySales,
    MonthlySales,
    PaymentMethod,
    PaymentSplit,
    RouteCount,
    SaleRecord,
    SalesBreakdown,
    VehicleRevenue,
)
from transport_stats.utils.coercion import coerce_price

_MONTH_PREFIX = re.compile(r"^(\d{4}-\d{2})")
_EMPTY_RECORD = SaleRecord()


def normalize_records(records: Optional[Iterable[Any]]) -> List[SaleRecord]:
    """Turn arbitrary caller input into a list of ``SaleRecord`` snapshots.

    ``None`` and non-collection inputs yield an empty list. Elements that are
    neither records nor mappings are kept as empty records so they still
    count as sales.
    """

    if records is None or isinstance(records, (str, bytes, Mapping, BaseModel)):
        return []
    try:
        items = list(records)
    except TypeError:
        return []
    return [_to_record(item) for item in items]


def _to_record(item: Any) -> SaleRecord:
    if isinstance(item, SaleRecord):
        return item
    if isinstance(item, Mapping):
        try:
            return SaleRecord.model_validate(dict(item))
        except PydanticValidationError:
            return SaleRecord(price=item.get("precio", item.get("price")))
    return _EMPTY_RECORD


def _most_frequent(counts: Mapping[str, int]) -> Tuple[str, int]:
    # max() keeps the first key among equal counts, and Counter keeps
    # insertion order, so ties resolve to the first-seen label.
    if not counts:
        return NOT_AVAILABLE, 0
    return max(counts.items(), key=lambda item: item[1])


class HistoryAggregator(IHistoryAggregator):
    """Performs read-only calculations on sale-record collections."""

    def compute_stats(self, records: Optional[Iterable[Any]]) -> AggregateStats:
        normalized = normalize_records(records)
        if not normalized:
            return AggregateStats()

        routes: Counter[str] = Counter()
        days: Counter[str] = Counter()
        hours: Counter[str] = Counter()
        payments: Counter[PaymentMethod] = Counter()
        vehicle_prices: Dict[str, List[float]] = {}
        prices: List[float] = []

        for record in normalized:
            price = coerce_price(record.price)
            prices.append(price)
            if record.route_name:
                routes[record.route_name] += 1
            if record.departure_date:
                days[record.departure_date] += 1
            if record.departure_time:
                hours[record.departure_time] += 1
            if record.payment_method is not None:
                payments[record.payment_method] += 1
            if record.vehicle_id:
                vehicle_prices.setdefault(record.vehicle_id, []).append(price)

        top_name, top_count = _most_frequent(routes)
        total_sales = len(normalized)
        return AggregateStats(
            top_route=RouteCount(name=top_name, count=top_count),
            busiest_day=_most_frequent(days)[0],
            busiest_hour=_most_frequent(hours)[0],
            payment_split=PaymentSplit(
                cash=payments[PaymentMethod.CASH],
                transfer=payments[PaymentMethod.TRANSFER],
            ),
            revenue_per_vehicle=self._rank_vehicles(vehicle_prices),
            total_sales=total_sales,
            total_revenue=math.fsum(prices),
            average_daily_sales=total_sales / max(1, len(days)),
        )

    def compute_breakdown(
        self,
        records: Optional[Iterable[Any]],
        *,
        recent_days: Optional[int] = None,
        top_routes: Optional[int] = None,
    ) -> SalesBreakdown:
        normalized = normalize_records(records)
        return SalesBreakdown(
            routes=tuple(self.route_ranking(normalized, limit=top_routes)),
            daily=tuple(self.sales_by_day(normalized, limit=recent_days)),
            hourly=tuple(self.sales_by_hour(normalized)),
            monthly=tuple(self.sales_by_month(normalized)),
        )

    def route_ranking(
        self, records: Optional[Iterable[Any]], *, limit: Optional[int] = None
    ) -> List[RouteCount]:
        counts: Counter[str] = Counter(
            record.route_name
            for record in normalize_records(records)
            if record.route_name
        )
        ranking = sorted(
            (RouteCount(name=name, count=count) for name, count in counts.items()),
            key=lambda entry: entry.count,
            reverse=True,
        )
        return ranking if limit is None else ranking[: max(limit, 0)]

    def sales_by_day(
        self, records: Optional[Iterable[Any]], *, limit: Optional[int] = None
    ) -> List[DailySales]:
        """Per-date totals in ascending date order; ``limit`` keeps the latest days."""

        grouped = self._group_with_revenue(
            (record.departure_date, record) for record in normalize_records(records)
        )
        series = [
            DailySales(date=date, sales=len(prices), revenue=math.fsum(prices))
            for date, prices in sorted(grouped.items())
        ]
        if limit is None:
            return series
        return series[-limit:] if limit > 0 else []

    def sales_by_hour(self, records: Optional[Iterable[Any]]) -> List[HourlySales]:
        counts: Counter[str] = Counter(
            record.departure_time
            for record in normalize_records(records)
            if record.departure_time
        )
        return [
            HourlySales(hour=hour, sales=count) for hour, count in sorted(counts.items())
        ]

    def sales_by_month(self, records: Optional[Iterable[Any]]) -> List[MonthlySales]:
        grouped = self._group_with_revenue(
            (self._month_of(record.departure_date), record)
            for record in normalize_records(records)
        )
        return [
            MonthlySales(month=month, sales=len(prices), revenue=math.fsum(prices))
            for month, prices in sorted(grouped.items())
        ]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _rank_vehicles(
        vehicle_prices: Mapping[str, List[float]]
    ) -> Tuple[VehicleRevenue, ...]:
        entries = [
            VehicleRevenue(vehicle_id=vehicle_id, revenue=math.fsum(prices))
            for vehicle_id, prices in vehicle_prices.items()
        ]
        # list.sort is stable with reverse=True: equal revenues keep input order.
        entries.sort(key=lambda entry: entry.revenue, reverse=True)
        return tuple(entries)

    @staticmethod
    def _group_with_revenue(
        keyed: Iterable[Tuple[Optional[str], SaleRecord]]
    ) -> Dict[str, List[float]]:
        grouped: Dict[str, List[float]] = {}
        for key, record in keyed:
            if key:
                grouped.setdefault(key, []).append(coerce_price(record.price))
        return grouped

    @staticmethod
    def _month_of(date: Optional[str]) -> Optional[str]:
        if not date:
            return None
        match = _MONTH_PREFIX.match(date)
        return match.group(1) if match else None


_default_aggregator = HistoryAggregator()


def compute_stats(records: Optional[Iterable[Any]]) -> AggregateStats:
    """Summarize ``records`` with the default aggregator."""

    return _default_aggregator.compute_stats(records)
