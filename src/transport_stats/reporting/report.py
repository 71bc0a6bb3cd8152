"""Report data assembled from sale statistics for an external document renderer."""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from transport_stats.analytics.aggregator import HistoryAggregator, normalize_records
from transport_stats.analytics.filters import filter_records
from transport_stats.domain.exceptions import ReportError
from transport_stats.utils.coercion import coerce_price
from transport_stats.utils.formatting import format_currency


class ReportTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    head: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    foot: Optional[Tuple[str, ...]] = None


class Report(BaseModel):
    """Renderer-agnostic report: a title, key/value rows and tables."""

    model_config = ConfigDict(frozen=True)

    title: str
    generated_on: date
    filter_label: Optional[str] = None
    summary: Tuple[Tuple[str, str], ...] = Field(default_factory=tuple)
    tables: Tuple[ReportTable, ...] = Field(default_factory=tuple)

    @property
    def filename(self) -> str:
        slug = "_".join(self.title.split())
        return f"{slug}_{self.generated_on.isoformat()}.pdf"


class ReportBuilder:
    def __init__(
        self,
        aggregator: Optional[HistoryAggregator] = None,
        *,
        currency: str = "USD",
        top_routes: Optional[int] = None,
        top_vehicles: Optional[int] = None,
    ) -> None:
        self._aggregator = aggregator or HistoryAggregator()
        self._currency = currency
        self._top_routes = top_routes
        self._top_vehicles = top_vehicles

    def build_general_report(
        self,
        records: Optional[Iterable[Any]],
        *,
        filter_label: str = "All sales",
        today: Optional[date] = None,
    ) -> Report:
        normalized = normalize_records(records)
        stats = self._aggregator.compute_stats(normalized)
        summary = (
            ("Total revenue", self._money(stats.total_revenue)),
            ("Total sales", str(stats.total_sales)),
            (
                "Top route",
                f"{stats.top_route.name} ({stats.top_route.count} trips)",
            ),
            ("Busiest day", stats.busiest_day),
            ("Busiest hour", stats.busiest_hour),
            ("Cash", f"{stats.payment_split.cash} transactions"),
            ("Transfer", f"{stats.payment_split.transfer} transactions"),
            ("Average daily sales", f"{stats.average_daily_sales:.2f}"),
        )

        tables: List[ReportTable] = []
        monthly = self._aggregator.sales_by_month(normalized)
        if monthly:
            tables.append(
                ReportTable(
                    title="Sales by month",
                    head=("Month", "Tickets sold", "Revenue"),
                    rows=tuple(
                        (entry.month, str(entry.sales), self._money(entry.revenue))
                        for entry in monthly
                    ),
                )
            )
        routes = self._aggregator.route_ranking(normalized, limit=self._top_routes)
        if routes:
            tables.append(
                ReportTable(
                    title="Most requested routes",
                    head=("Route", "Trips"),
                    rows=tuple((entry.name, str(entry.count)) for entry in routes),
                )
            )
        hourly = self._aggregator.sales_by_hour(normalized)
        if hourly:
            tables.append(
                ReportTable(
                    title="Sales by hour",
                    head=("Hour", "Tickets sold"),
                    rows=tuple((entry.hour, str(entry.sales)) for entry in hourly),
                )
            )
        vehicles = stats.revenue_per_vehicle
        if self._top_vehicles is not None:
            vehicles = vehicles[: self._top_vehicles]
        if vehicles:
            tables.append(
                ReportTable(
                    title="Revenue per bus",
                    head=("Bus", "Total revenue"),
                    rows=tuple(
                        (f"Bus {entry.vehicle_id}", self._money(entry.revenue))
                        for entry in vehicles
                    ),
                    foot=(
                        "Total",
                        self._money(math.fsum(entry.revenue for entry in vehicles)),
                    ),
                )
            )

        return Report(
            title="General statistics report",
            generated_on=today or date.today(),
            filter_label=filter_label,
            summary=summary,
            tables=tuple(tables),
        )

    def build_vehicle_report(
        self,
        records: Optional[Iterable[Any]],
        vehicle_id: str,
        *,
        plate: str = "-",
        driver: str = "-",
        today: Optional[date] = None,
    ) -> Report:
        if not vehicle_id or not str(vehicle_id).strip():
            raise ReportError("vehicle_id is required for a vehicle report")
        vehicle_records = filter_records(records, vehicle_id=vehicle_id)
        stats = self._aggregator.compute_stats(vehicle_records)
        summary = (
            ("Bus number", str(vehicle_id)),
            ("Plate", plate),
            ("Driver", driver),
            ("Total sales", str(stats.total_sales)),
            ("Total revenue", self._money(stats.total_revenue)),
        )
        tables: List[ReportTable] = []
        if vehicle_records:
            tables.append(
                ReportTable(
                    title="Sales history",
                    head=("Date", "Time", "Route", "Payment", "Price"),
                    rows=tuple(
                        (
                            record.departure_date or "-",
                            record.departure_time or "-",
                            record.route_name or "-",
                            record.payment_method.value if record.payment_method else "-",
                            self._money(coerce_price(record.price)),
                        )
                        for record in vehicle_records
                    ),
                )
            )
        return Report(
            title=f"Bus {vehicle_id} report",
            generated_on=today or date.today(),
            summary=summary,
            tables=tuple(tables),
        )

    def _money(self, amount: float) -> str:
        return format_currency(amount, self._currency)
