"""Contracts separating record sources, aggregation and consumers."""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Protocol

from .models import AggregateStats, SaleRecord, SalesBreakdown

RecordsListener = Callable[[List[SaleRecord]], None]
StatsListener = Callable[[AggregateStats], None]
Unsubscribe = Callable[[], None]


class ISaleRecordSource(Protocol):
    """Returns the current sale-record collection and pushes refreshed ones."""

    def fetch_all(self) -> List[SaleRecord]:
        """Return the full current collection in store order."""

    def subscribe(self, listener: RecordsListener) -> Unsubscribe:
        """Register a listener called with the full collection after each change."""


class IHistoryAggregator(Protocol):
    """Pure business logic deriving statistics from sale records."""

    def compute_stats(self, records: Optional[Iterable[Any]]) -> AggregateStats:
        """Summarize the records; never raises for malformed data."""

    def compute_breakdown(
        self,
        records: Optional[Iterable[Any]],
        *,
        recent_days: Optional[int] = None,
        top_routes: Optional[int] = None,
    ) -> SalesBreakdown:
        """Return chart-ready series for the records."""
