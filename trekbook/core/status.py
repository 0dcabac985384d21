from __future__ import annotations

import re
from typing import Any

CANONICAL_BOOKING_STATUSES = {
    "pending",
    "confirmed",
    "cancelled",
    "completed",
}

_BOOKING_STATUS_ALIASES = {
    "pending_payment": "pending",
    "awaiting_payment": "pending",
    "canceled": "cancelled",
    "complete": "completed",
    "done": "completed",
}

_ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "cancelled": set(),
    "completed": set(),
}

CANCELLABLE_STATUSES = {"pending", "confirmed"}
REVENUE_STATUSES = {"confirmed", "completed"}


def canonical_booking_status(value: Any) -> str:
    if value is None:
        return "pending"

    raw = str(value).strip()
    if not raw:
        return "pending"

    token = raw.lower()
    token = re.sub(r"[\s\-]+", "_", token)
    token = re.sub(r"_+", "_", token).strip("_")

    mapped = _BOOKING_STATUS_ALIASES.get(token, token)
    if mapped in CANONICAL_BOOKING_STATUSES:
        return mapped

    # Legacy rows with unknown values are treated as still awaiting confirmation.
    return "pending"


def can_transition(current: Any, target: Any) -> bool:
    current_status = canonical_booking_status(current)
    target_status = canonical_booking_status(target)
    if current_status == target_status:
        return True
    return target_status in _ALLOWED_TRANSITIONS.get(current_status, set())


def normalize_booking_status_row(row: dict[str, Any]) -> dict[str, Any]:
    normalized = dict(row)
    if "status" in normalized:
        normalized["status"] = canonical_booking_status(normalized.get("status"))
    return normalized
