"""SQLite-backed sale-record store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, List, Optional, Tuple
from uuid import uuid4

from transport_stats.domain.exceptions import SourceError
from transport_stats.domain.interfaces import RecordsListener, Unsubscribe
from transport_stats.domain.models import SaleRecord
from transport_stats.utils.validators import validate_date_range

from .listeners import ListenerRegistry

# ``price`` has no declared type so SQLite keeps numbers and text as stored.
_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS sales (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    route_name TEXT,
    departure_date TEXT,
    departure_time TEXT,
    payment_method TEXT,
    vehicle_id TEXT,
    price,
    passenger TEXT,
    seat TEXT
);
"""

_INSERT_SQL = """
INSERT INTO sales (id, route_name, departure_date, departure_time, payment_method, vehicle_id, price, passenger, seat)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    route_name=excluded.route_name,
    departure_date=excluded.departure_date,
    departure_time=excluded.departure_time,
    payment_method=excluded.payment_method,
    vehicle_id=excluded.vehicle_id,
    price=excluded.price,
    passenger=excluded.passenger,
    seat=excluded.seat;
"""

_SELECT_COLUMNS = (
    "SELECT id, route_name, departure_date, departure_time, payment_method, "
    "vehicle_id, price, passenger, seat FROM sales"
)

_SELECT_ALL_SQL = f"{_SELECT_COLUMNS} ORDER BY seq ASC;"

_SELECT_BY_VEHICLE_SQL = f"{_SELECT_COLUMNS} WHERE vehicle_id = ? ORDER BY seq ASC;"

_SELECT_BY_DATE_SQL = (
    f"{_SELECT_COLUMNS} WHERE departure_date BETWEEN ? AND ? ORDER BY seq ASC;"
)

_Row = Tuple[
    str,
    Optional[str],
    Optional[str],
    Optional[str],
    Optional[str],
    Optional[str],
    Any,
    Optional[str],
    Optional[str],
]


class SQLiteSaleRepository:
    """Local sale-record store that notifies subscribers after each write."""

    def __init__(self, db_path: str | Path, *, logger: Optional[logging.Logger] = None):
        self._db_path = str(db_path)
        self._logger = logger or logging.getLogger(__name__)
        self._listeners: ListenerRegistry[List[SaleRecord]] = ListenerRegistry(self._logger)
        self._ensure_schema()

    def save(self, record: SaleRecord) -> SaleRecord:
        """Insert or replace ``record``; returns it with its assigned id."""

        if record.id is None:
            record = record.model_copy(update={"id": str(uuid4())})
        self._execute(
            _INSERT_SQL,
            (
                record.id,
                record.route_name,
                record.departure_date,
                record.departure_time,
                record.payment_method.value if record.payment_method else None,
                record.vehicle_id,
                self._price_param(record.price),
                record.passenger,
                record.seat,
            ),
        )
        self._logger.debug("sale_saved", extra={"sale_id": record.id})
        self._listeners.notify(self.fetch_all())
        return record

    def fetch_all(self) -> List[SaleRecord]:
        return self._query(_SELECT_ALL_SQL)

    def find_by_vehicle(self, vehicle_id: str) -> List[SaleRecord]:
        return self._query(_SELECT_BY_VEHICLE_SQL, (vehicle_id,))

    def find_by_date(self, start: str, end: str) -> List[SaleRecord]:
        """Return records whose ISO departure date falls in the inclusive window."""

        validate_date_range(start, end)
        return self._query(_SELECT_BY_DATE_SQL, (start, end))

    def subscribe(self, listener: RecordsListener) -> Unsubscribe:
        return self._listeners.add(listener)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_schema(self) -> None:
        self._execute(_CREATE_TABLE_SQL)

    def _execute(self, sql: str, params: Tuple[Any, ...] = ()) -> None:
        try:
            with sqlite3.connect(self._db_path) as conn:
                conn.execute(sql, params)
                conn.commit()
        except sqlite3.Error as exc:
            raise SourceError(
                "SQLite write failed", context={"db_path": self._db_path}
            ) from exc

    def _query(self, sql: str, params: Tuple[Any, ...] = ()) -> List[SaleRecord]:
        try:
            with sqlite3.connect(self._db_path) as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise SourceError(
                "SQLite read failed", context={"db_path": self._db_path}
            ) from exc
        return [self._row_to_record(row) for row in rows]

    @staticmethod
    def _price_param(price: Any) -> Any:
        if price is None or isinstance(price, str):
            return price
        if isinstance(price, (int, float)) and not isinstance(price, bool):
            return price
        return str(price)

    @staticmethod
    def _row_to_record(row: _Row) -> SaleRecord:
        id_, route, date, time, method, vehicle, price, passenger, seat = row
        return SaleRecord(
            id=id_,
            route_name=route,
            departure_date=date,
            departure_time=time,
            payment_method=method,
            vehicle_id=vehicle,
            price=price,
            passenger=passenger,
            seat=seat,
        )
