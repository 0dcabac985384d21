from __future__ import annotations

from typing import Any

DURATION_BUCKETS = ("1-2", "3-4", "5+")
PRICE_BUCKETS = ("0-7500", "7500-12500", "12500+")
SORT_OPTIONS = ("rating", "price-low", "price-high", "duration")


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _matches_search(package: dict[str, Any], search_term: str) -> bool:
    haystacks = [
        str(package.get("title") or "").lower(),
        str(package.get("description") or "").lower(),
        str(package.get("location") or "").lower(),
    ]
    return any(search_term in value for value in haystacks)


def _matches_duration(duration: float, bucket: str | None) -> bool:
    if bucket == "1-2":
        return duration <= 2
    if bucket == "3-4":
        return 3 <= duration <= 4
    if bucket == "5+":
        return duration >= 5
    return True


def _matches_price(price: float, bucket: str | None) -> bool:
    if bucket == "0-7500":
        return price <= 7500
    if bucket == "7500-12500":
        return 7500 < price <= 12500
    if bucket == "12500+":
        return price > 12500
    return True


def sort_packages(packages: list[dict[str, Any]], sort_by: str | None) -> list[dict[str, Any]]:
    if sort_by == "price-low":
        return sorted(packages, key=lambda row: _to_float(row.get("price")))
    if sort_by == "price-high":
        return sorted(packages, key=lambda row: _to_float(row.get("price")), reverse=True)
    if sort_by == "duration":
        return sorted(packages, key=lambda row: _to_float(row.get("duration")))
    return sorted(packages, key=lambda row: _to_float(row.get("rating")), reverse=True)


def filter_packages(
    packages: list[dict[str, Any]],
    *,
    search: str | None = None,
    location: str | None = None,
    difficulty: str | None = None,
    duration: str | None = None,
    price_range: str | None = None,
    sort_by: str | None = "rating",
) -> list[dict[str, Any]]:
    search_term = (search or "").strip().lower()
    filtered = [
        package
        for package in packages
        if (not search_term or _matches_search(package, search_term))
        and (not location or package.get("location") == location)
        and (not difficulty or package.get("difficulty") == difficulty)
        and _matches_duration(_to_float(package.get("duration")), duration)
        and _matches_price(_to_float(package.get("price")), price_range)
    ]
    return sort_packages(filtered, sort_by)


def filter_admin_packages(
    packages: list[dict[str, Any]],
    *,
    search: str | None = None,
    status_filter: str = "all",
) -> list[dict[str, Any]]:
    search_term = (search or "").strip().lower()
    rows: list[dict[str, Any]] = []
    for package in packages:
        if search_term and not _matches_search(package, search_term):
            continue
        is_active = bool(package.get("is_active"))
        if status_filter == "active" and not is_active:
            continue
        if status_filter == "inactive" and is_active:
            continue
        rows.append(package)
    return rows


def normalize_itinerary(package: dict[str, Any]) -> dict[str, Any]:
    """Flatten joined ``itinerary_days`` rows into an ordered ``itinerary`` list."""
    normalized = dict(package)
    days = normalized.pop("itinerary_days", None)
    if not isinstance(days, list):
        normalized.setdefault("itinerary", [])
        return normalized

    ordered = sorted(
        (day for day in days if isinstance(day, dict)),
        key=lambda day: int(day.get("day_number") or 0),
    )
    normalized["itinerary"] = [
        {
            "day": int(day.get("day_number") or 0),
            "title": day.get("title") or "",
            "description": day.get("description") or "",
            "activities": list(day.get("activities") or []),
        }
        for day in ordered
    ]
    return normalized
