from datetime import date
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from trekbook.api.v1.routes.packages import clear_catalog_cache
from trekbook.core.auth import AuthContext, require_admin
from trekbook.core.availability import remaining_capacity, with_remaining
from trekbook.core.errors import http_error_from_runtime_error
from trekbook.integrations.supabase_client import (
    book_package_date as book_package_date_rpc,
    create_availability as create_availability_row,
    delete_availability as delete_availability_row,
    get_availability_by_id,
    get_package_by_id,
    list_package_availability,
    update_availability as update_availability_row,
)
from trekbook.schemas.common import (
    AvailabilityCreateRequest,
    AvailabilityDeleteResponse,
    AvailabilityListResponse,
    AvailabilityUpdateRequest,
    AvailabilityWriteResponse,
    DateBookingResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _with_remaining(row: dict) -> dict:
    return {**row, "remaining": remaining_capacity(row)}


def _require_package(package_id: str) -> dict:
    try:
        package = get_package_by_id(package_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not package:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package


def _require_slot(availability_id: str) -> dict:
    try:
        slot = get_availability_by_id(availability_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not slot:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability slot not found")
    return slot


@router.get("/packages/{package_id}/availability", response_model=AvailabilityListResponse)
def get_package_availability(
    package_id: str,
    _auth: AuthContext = Depends(require_admin),
):
    try:
        rows = list_package_availability(package_id=package_id, from_date=date.today())
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    items = with_remaining(rows)
    return {
        "package_id": package_id,
        "items": items,
        "count": len(items),
    }


@router.post("/packages/{package_id}/availability", response_model=AvailabilityWriteResponse)
def post_package_availability(
    package_id: str,
    payload: AvailabilityCreateRequest,
    auth: AuthContext = Depends(require_admin),
):
    if payload.available_date < date.today():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="available_date cannot be in the past.",
        )
    _require_package(package_id)

    try:
        created = create_availability_row(
            package_id=package_id,
            available_date=payload.available_date,
            max_bookings=payload.max_bookings,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    clear_catalog_cache()
    logger.info(
        "Availability added (package_id=%s, date=%s, max_bookings=%s, by=%s)",
        package_id,
        payload.available_date.isoformat(),
        payload.max_bookings,
        auth.user_id,
    )
    return {"ok": True, "availability": _with_remaining(created)}


@router.patch("/availability/{availability_id}", response_model=AvailabilityWriteResponse)
def patch_availability(
    availability_id: str,
    payload: AvailabilityUpdateRequest,
    _auth: AuthContext = Depends(require_admin),
):
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No availability fields provided.",
        )

    slot = _require_slot(availability_id)
    current_bookings = int(slot.get("current_bookings") or 0)
    if "max_bookings" in changes and changes["max_bookings"] < current_bookings:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"max_bookings cannot be lower than current bookings ({current_bookings}).",
        )

    try:
        updated = update_availability_row(availability_id=availability_id, payload=changes)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability slot not found")

    clear_catalog_cache()
    return {"ok": True, "availability": _with_remaining(updated)}


@router.delete("/availability/{availability_id}", response_model=AvailabilityDeleteResponse)
def delete_availability(
    availability_id: str,
    _auth: AuthContext = Depends(require_admin),
):
    slot = _require_slot(availability_id)
    if int(slot.get("current_bookings") or 0) > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot delete an availability slot that already has bookings.",
        )

    try:
        delete_availability_row(availability_id=availability_id)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    clear_catalog_cache()
    return {"ok": True, "availability_id": availability_id}


@router.post(
    "/packages/{package_id}/availability/{available_date}/book",
    response_model=DateBookingResponse,
)
def book_date(
    package_id: str,
    available_date: date,
    auth: AuthContext = Depends(require_admin),
):
    try:
        slot = book_package_date_rpc(
            access_token=auth.access_token,
            package_id=package_id,
            available_date=available_date,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    clear_catalog_cache()
    logger.info(
        "Manual date booking (package_id=%s, date=%s, by=%s)",
        package_id,
        available_date.isoformat(),
        auth.user_id,
    )
    return {
        "ok": True,
        "package_id": package_id,
        "available_date": available_date,
        "availability": _with_remaining(slot) if slot else None,
    }
