from __future__ import annotations

from datetime import date, datetime
from typing import Any

from trekbook.core.status import REVENUE_STATUSES, canonical_booking_status


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _parse_created_at(value: Any) -> date | None:
    if not value:
        return None
    raw = str(value).replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            return None


def compute_admin_stats(
    bookings: list[dict[str, Any]],
    *,
    total_packages: int,
    total_users: int,
    today: date,
) -> dict[str, Any]:
    month_start = today.replace(day=1)
    statuses = [canonical_booking_status(row.get("status")) for row in bookings]

    total_revenue = sum(
        _to_float(row.get("total_amount"))
        for row, status in zip(bookings, statuses)
        if status in REVENUE_STATUSES
    )
    monthly_bookings = 0
    for row in bookings:
        created = _parse_created_at(row.get("created_at"))
        if created is not None and created >= month_start:
            monthly_bookings += 1

    return {
        "totalBookings": len(bookings),
        "totalRevenue": round(total_revenue, 2),
        "totalPackages": total_packages,
        "totalUsers": total_users,
        "monthlyBookings": monthly_bookings,
        "pendingBookings": sum(1 for status in statuses if status == "pending"),
    }


def compute_booking_stats(bookings: list[dict[str, Any]]) -> dict[str, Any]:
    statuses = [canonical_booking_status(row.get("status")) for row in bookings]
    created = [str(row.get("created_at")) for row in bookings if row.get("created_at")]
    return {
        "total_bookings": len(bookings),
        "confirmed_bookings": statuses.count("confirmed"),
        "completed_bookings": statuses.count("completed"),
        "pending_bookings": statuses.count("pending"),
        "total_spent": round(
            sum(
                _to_float(row.get("total_amount"))
                for row, status in zip(bookings, statuses)
                if status in REVENUE_STATUSES
            ),
            2,
        ),
        "last_booking_date": max(created) if created else None,
    }
