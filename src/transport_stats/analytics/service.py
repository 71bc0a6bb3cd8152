"""Statistics facade that coordinates a record source with the aggregator."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from transport_stats.analytics.aggregator import HistoryAggregator
from transport_stats.analytics.filters import filter_records
from transport_stats.domain.exceptions import SourceError
from transport_stats.domain.interfaces import (
    IHistoryAggregator,
    ISaleRecordSource,
    StatsListener,
    Unsubscribe,
)
from transport_stats.domain.models import AggregateStats, SaleRecord, SalesBreakdown
from transport_stats.storage.listeners import ListenerRegistry


class StatisticsService:
    """High-level facade used by the view layer.

    Every call recomputes from the records the source returns; the service
    keeps no derived state between calls.
    """

    def __init__(
        self,
        source: ISaleRecordSource,
        aggregator: IHistoryAggregator | None = None,
        *,
        recent_days: Optional[int] = 14,
        top_routes: Optional[int] = 8,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._source = source
        self._aggregator = aggregator or HistoryAggregator()
        self._recent_days = recent_days
        self._top_routes = top_routes
        self._logger = logger or logging.getLogger(__name__)
        self._listeners: ListenerRegistry[AggregateStats] = ListenerRegistry(self._logger)
        self._source_unsubscribe: Optional[Unsubscribe] = None

    def get_records(self, **filters: Any) -> List[SaleRecord]:
        """Return source records narrowed by :func:`filter_records` criteria."""

        records = self._source.fetch_all()
        if not filters:
            return records
        return filter_records(records, **filters)

    def get_stats(self, **filters: Any) -> AggregateStats:
        return self._aggregator.compute_stats(self.get_records(**filters))

    def get_breakdown(self, **filters: Any) -> SalesBreakdown:
        return self._aggregator.compute_breakdown(
            self.get_records(**filters),
            recent_days=self._recent_days,
            top_routes=self._top_routes,
        )

    def record_sale(self, record: SaleRecord) -> SaleRecord:
        """Persist a sale through sources that support writes."""

        save = getattr(self._source, "save", None)
        if save is None:
            raise SourceError(
                "Record source is read-only",
                context={"source": type(self._source).__name__},
            )
        return save(record) or record

    def subscribe(self, listener: StatsListener) -> Unsubscribe:
        """Call ``listener`` with fresh stats whenever the source changes."""

        if self._source_unsubscribe is None:
            self._source_unsubscribe = self._source.subscribe(self._on_records)
        remove = self._listeners.add(listener)

        def unsubscribe() -> None:
            remove()
            if not self._listeners and self._source_unsubscribe is not None:
                self._source_unsubscribe()
                self._source_unsubscribe = None

        return unsubscribe

    def to_dataframe(self, **filters: Any) -> Any:
        """Export sale records to a pandas DataFrame."""

        try:
            import pandas as pd  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pandas is required for dataframe export") from exc

        data = [record.model_dump(mode="json") for record in self.get_records(**filters)]
        return pd.DataFrame(data)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _on_records(self, records: List[SaleRecord]) -> None:
        stats = self._aggregator.compute_stats(records)
        self._logger.info(
            "stats_recomputed",
            extra={"total_sales": stats.total_sales, "listeners": len(self._listeners)},
        )
        self._listeners.notify(stats)
