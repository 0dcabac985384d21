from __future__ import annotations

from datetime import date
from typing import Any


def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _slot_date(row: dict[str, Any]) -> str:
    return str(row.get("available_date") or "")[:10]


def remaining_capacity(row: dict[str, Any]) -> int:
    return max(0, _to_int(row.get("max_bookings")) - _to_int(row.get("current_bookings")))


def is_open_slot(row: dict[str, Any], *, today: date) -> bool:
    """A slot accepts bookings while it is enabled, not in the past and below capacity."""
    if not row.get("is_available"):
        return False
    slot_date = _slot_date(row)
    if not slot_date or slot_date < today.isoformat():
        return False
    return _to_int(row.get("current_bookings")) < _to_int(row.get("max_bookings"))


def open_dates(rows: list[dict[str, Any]], *, today: date) -> list[str]:
    dates = {_slot_date(row) for row in rows if is_open_slot(row, today=today)}
    return sorted(dates)


def find_slot(rows: list[dict[str, Any]], available_date: date) -> dict[str, Any] | None:
    target = available_date.isoformat()
    for row in rows:
        if _slot_date(row) == target:
            return row
    return None


def with_remaining(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    enriched: list[dict[str, Any]] = []
    for row in sorted(rows, key=_slot_date):
        next_row = dict(row)
        next_row["remaining"] = remaining_capacity(row)
        enriched.append(next_row)
    return enriched


def is_conflict_error(message: str) -> bool:
    lowered = message.lower()
    return any(
        marker in lowered
        for marker in (
            "capacity",
            "fully booked",
            "not available",
            "no availability",
            "duplicate key",
            "already exists",
            "cannot be cancelled",
            "is final",
        )
    )
