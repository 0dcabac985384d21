import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from trekbook.api.v1.routes.packages import clear_catalog_cache
from trekbook.core.auth import AuthContext, require_admin
from trekbook.core.catalog import filter_admin_packages
from trekbook.core.errors import http_error_from_runtime_error
from trekbook.integrations.supabase_client import (
    create_package as create_package_row,
    delete_package as delete_package_row,
    get_package_by_id,
    list_all_packages_admin,
    package_has_bookings,
    update_package as update_package_row,
    update_package_status as update_package_status_row,
)
from trekbook.schemas.common import (
    AdminPackageListResponse,
    PackageCreateRequest,
    PackageDeleteResponse,
    PackageStatusUpdateRequest,
    PackageUpdateRequest,
    PackageWriteResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _require_package(package_id: str) -> dict:
    try:
        package = get_package_by_id(package_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not package:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package


@router.get("", response_model=AdminPackageListResponse)
def get_admin_packages(
    status_filter: str = Query(default="all", alias="status", pattern="^(all|active|inactive)$"),
    search: str | None = Query(default=None, max_length=120),
    _auth: AuthContext = Depends(require_admin),
):
    try:
        rows = list_all_packages_admin()
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    items = filter_admin_packages(rows, search=search, status_filter=status_filter)
    return {
        "items": items,
        "count": len(items),
    }


@router.post("", response_model=PackageWriteResponse)
def post_admin_package(
    payload: PackageCreateRequest,
    auth: AuthContext = Depends(require_admin),
):
    data = payload.model_dump(exclude={"itinerary"})
    itinerary = [day.model_dump() for day in payload.itinerary]

    try:
        created = create_package_row(payload=data, itinerary=itinerary)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    clear_catalog_cache()
    logger.info("Package created (package_id=%s, by=%s)", created.get("id"), auth.user_id)
    return {"ok": True, "package": created}


@router.patch("/{package_id}", response_model=PackageWriteResponse)
def patch_admin_package(
    package_id: str,
    payload: PackageUpdateRequest,
    _auth: AuthContext = Depends(require_admin),
):
    changes = payload.model_dump(exclude_none=True, exclude={"itinerary"})
    itinerary = (
        [day.model_dump() for day in payload.itinerary]
        if payload.itinerary is not None
        else None
    )
    if not changes and itinerary is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No package fields provided.",
        )

    _require_package(package_id)
    try:
        updated = update_package_row(package_id=package_id, payload=changes, itinerary=itinerary)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")

    clear_catalog_cache()
    return {"ok": True, "package": updated}


@router.patch("/{package_id}/status", response_model=PackageWriteResponse)
def patch_admin_package_status(
    package_id: str,
    payload: PackageStatusUpdateRequest,
    auth: AuthContext = Depends(require_admin),
):
    _require_package(package_id)
    try:
        updated = update_package_status_row(package_id=package_id, is_active=payload.is_active)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")

    clear_catalog_cache()
    logger.info(
        "Package status changed (package_id=%s, is_active=%s, by=%s)",
        package_id,
        payload.is_active,
        auth.user_id,
    )
    return {"ok": True, "package": updated}


@router.delete("/{package_id}", response_model=PackageDeleteResponse)
def delete_admin_package(
    package_id: str,
    auth: AuthContext = Depends(require_admin),
):
    _require_package(package_id)
    try:
        has_bookings = package_has_bookings(package_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if has_bookings:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Package has bookings; deactivate it instead of deleting.",
        )

    try:
        deleted = delete_package_row(package_id=package_id)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")

    clear_catalog_cache()
    logger.info("Package deleted (package_id=%s, by=%s)", package_id, auth.user_id)
    return {"ok": True, "package_id": package_id}
