"""Call-site filtering applied before handing records to the aggregator."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from transport_stats.analytics.aggregator import normalize_records
from transport_stats.domain.exceptions import ValidationError
from transport_stats.domain.models import (
    PaymentMethod,
    SaleRecord,
    normalize_payment_method,
)
from transport_stats.utils.validators import validate_month


def filter_records(
    records: Optional[Iterable[Any]],
    *,
    vehicle_id: Optional[str] = None,
    month: Optional[str] = None,
    payment_method: Optional[str | PaymentMethod] = None,
    search: Optional[str] = None,
) -> List[SaleRecord]:
    """Return the records matching every supplied criterion, in input order.

    ``month`` is a ``YYYY-MM`` prefix of the departure date. ``search`` is a
    case-insensitive substring match on route, vehicle or date.
    """

    if month is not None:
        validate_month(month)
    method = None
    if payment_method is not None:
        method = normalize_payment_method(payment_method)
        if method is None:
            raise ValidationError(
                "Unsupported payment method", context={"payment_method": payment_method}
            )
    needle = search.strip().lower() if search else ""

    selected: List[SaleRecord] = []
    for record in normalize_records(records):
        if vehicle_id is not None and record.vehicle_id != str(vehicle_id).strip():
            continue
        if month is not None and not (record.departure_date or "").startswith(month):
            continue
        if method is not None and record.payment_method is not method:
            continue
        if needle and not _matches(record, needle):
            continue
        selected.append(record)
    return selected


def _matches(record: SaleRecord, needle: str) -> bool:
    haystack = (record.route_name, record.vehicle_id, record.departure_date)
    return any(needle in value.lower() for value in haystack if value)
