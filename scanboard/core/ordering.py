"""
Sort, filter, pagination and summary helpers shared by every repository.

The in-memory repository applies these directly; the SQL repository reuses the
argument checks and summary shape so both report identical envelopes for the
same request.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from scanboard.core.envelope import (
    INVALID_PAGE,
    INVALID_PERCENT,
    UNKNOWN_SORT_FIELD,
    UNKNOWN_SORT_METHOD,
    Envelope,
)
from scanboard.db.schemas import RepositoryRecord

SORT_ORDERS = ("asc", "desc")
SORT_FIELDS = ("percent", "created", "updated", "found")
TIMESTAMP_FIELDS = ("created", "updated", "found")
DEFAULT_ORDER = "desc"
DEFAULT_FIELD = "percent"

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def sort_argument_error(order: Optional[str], field: Optional[str] = DEFAULT_FIELD) -> Optional[Envelope]:
    if (DEFAULT_ORDER if order is None else order) not in SORT_ORDERS:
        return Envelope.fail(UNKNOWN_SORT_METHOD)
    if (DEFAULT_FIELD if field is None else field) not in SORT_FIELDS:
        return Envelope.fail(UNKNOWN_SORT_FIELD)
    return None


def threshold_error(min_percent: Any) -> Optional[Envelope]:
    # Zero is a valid threshold; only non-numbers and non-finite values are rejected
    if isinstance(min_percent, bool) or not isinstance(min_percent, (int, float)):
        return Envelope.fail(INVALID_PERCENT)
    if not math.isfinite(min_percent):
        return Envelope.fail(INVALID_PERCENT)
    return None


def page_error(page: Any, limit: Any) -> Optional[Envelope]:
    for value in (page, limit):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            return Envelope.fail(INVALID_PAGE)
    return None


def _sort_key(field: str):
    if field == "percent":
        return lambda record: record.scan.percent

    def timestamp_key(record: RepositoryRecord):
        value = getattr(record, field)
        # Missing timestamps sort as the earliest value
        return (value is not None, value if value is not None else _EARLIEST)

    return timestamp_key


def sort_records(
    records: Sequence[RepositoryRecord],
    order: Optional[str] = DEFAULT_ORDER,
    field: Optional[str] = DEFAULT_FIELD,
) -> Envelope:
    """Return a new, stably ordered list; equal keys keep their relative order."""
    error = sort_argument_error(order, field)
    if error is not None:
        return error
    order = DEFAULT_ORDER if order is None else order
    field = DEFAULT_FIELD if field is None else field
    # sorted() stays stable with reverse=True
    ordered = sorted(records, key=_sort_key(field), reverse=(order == "desc"))
    return Envelope.ok(list(ordered))


def filter_records(records: Sequence[RepositoryRecord], min_percent: Any) -> Envelope:
    error = threshold_error(min_percent)
    if error is not None:
        return error
    return Envelope.ok([record for record in records if record.scan.percent >= min_percent])


def total_pages(total_items: int, limit: int) -> int:
    return math.ceil(total_items / limit) if total_items else 0


def page_payload(items: List[Any], total_items: int, limit: int) -> Dict[str, Any]:
    return {
        "items": items,
        "total_items": total_items,
        "total_pages": total_pages(total_items, limit),
    }


def paginate(records: Sequence[RepositoryRecord], page: int = 1, limit: int = 10) -> Envelope:
    error = page_error(page, limit)
    if error is not None:
        return error
    start = (page - 1) * limit
    return Envelope.ok(page_payload(list(records[start:start + limit]), len(records), limit))


def build_summary(
    total: int,
    analyzed: int,
    highest: Optional[float],
    lowest: Optional[float],
    average: Optional[float],
) -> Dict[str, Any]:
    return {
        "total": total,
        "analyzed": analyzed,
        "not_analyzed": total - analyzed,
        "highest": highest,
        "lowest": lowest,
        "average": average,
    }


def summarize(records: Sequence[RepositoryRecord]) -> Dict[str, Any]:
    """Dashboard statistics; a record counts as analyzed once ``found`` is set."""
    if not records:
        return build_summary(0, 0, None, None, None)
    percents = [record.scan.percent for record in records]
    analyzed = sum(1 for record in records if record.found is not None)
    return build_summary(
        total=len(records),
        analyzed=analyzed,
        highest=max(percents),
        lowest=min(percents),
        average=sum(percents) / len(percents),
    )


def stamp_timestamps(record: Mapping, now: Optional[datetime] = None) -> dict:
    """Copy of a raw record with missing ``created``/``updated`` set to now."""
    stamped = dict(record)
    moment = (now or datetime.now(timezone.utc)).isoformat()
    for field in ("created", "updated"):
        if stamped.get(field) in (None, ""):
            stamped[field] = moment
    return stamped
