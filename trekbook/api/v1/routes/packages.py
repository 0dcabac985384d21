from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from trekbook.core.availability import open_dates
from trekbook.core.cache import TTLCache
from trekbook.core.catalog import filter_packages
from trekbook.core.config import settings
from trekbook.integrations.supabase_client import (
    get_active_package_by_id,
    list_active_packages,
    list_package_availability,
    list_package_reviews,
)
from trekbook.schemas.common import (
    AvailableDatesResponse,
    PackageItem,
    PackageListResponse,
    ReviewListResponse,
)

router = APIRouter()
_CACHE = TTLCache(settings.cache_ttl_seconds)


def clear_catalog_cache() -> None:
    _CACHE.clear()


def _load_active_packages() -> list[dict]:
    return _CACHE.get_or_load("packages:active", list_active_packages)


@router.get("", response_model=PackageListResponse)
def get_packages(
    search: str | None = Query(default=None, max_length=120),
    location: str | None = Query(default=None),
    difficulty: str | None = Query(default=None, pattern="^(Easy|Moderate|Difficult|Expert)$"),
    duration: str | None = Query(default=None, pattern=r"^(1-2|3-4|5\+)$"),
    price_range: str | None = Query(default=None, pattern=r"^(0-7500|7500-12500|12500\+)$"),
    sort_by: str = Query(default="rating", pattern="^(rating|price-low|price-high|duration)$"),
):
    try:
        rows = _load_active_packages()
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    items = filter_packages(
        rows,
        search=search,
        location=location,
        difficulty=difficulty,
        duration=duration,
        price_range=price_range,
        sort_by=sort_by,
    )
    return {
        "items": items,
        "count": len(items),
        "total": len(rows),
    }


@router.get("/{package_id}", response_model=PackageItem)
def get_package(package_id: str):
    try:
        row = get_active_package_by_id(package_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return row


@router.get("/{package_id}/available-dates", response_model=AvailableDatesResponse)
def get_available_dates(package_id: str):
    today = date.today()
    try:
        rows = list_package_availability(package_id=package_id, from_date=today)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    dates = open_dates(rows, today=today)
    return {
        "package_id": package_id,
        "dates": dates,
        "count": len(dates),
    }


@router.get("/{package_id}/reviews", response_model=ReviewListResponse)
def get_package_reviews(package_id: str):
    try:
        rows = list_package_reviews(package_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "items": rows,
        "count": len(rows),
    }
