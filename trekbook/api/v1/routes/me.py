import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from trekbook.core.auth import AuthContext, require_authenticated
from trekbook.core.errors import http_error_from_runtime_error
from trekbook.core.stats import compute_booking_stats
from trekbook.core.validation import ValidationError, normalize_name, normalize_phone
from trekbook.integrations.activity import record_activity
from trekbook.integrations.supabase_client import (
    get_profile,
    list_user_activity,
    list_user_bookings,
    update_profile as update_profile_row,
)
from trekbook.schemas.common import (
    ActivityListResponse,
    MyBookingsResponse,
    ProfileItem,
    ProfileUpdateRequest,
    UserDashboardResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_RECENT_ACTIVITY_LIMIT = 10


def _load_profile(user_id: str) -> dict:
    try:
        profile = get_profile(user_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.get("/profile", response_model=ProfileItem)
def get_my_profile(auth: AuthContext = Depends(require_authenticated)):
    return _load_profile(auth.user_id)


@router.patch("/profile", response_model=ProfileItem)
def patch_my_profile(
    payload: ProfileUpdateRequest,
    auth: AuthContext = Depends(require_authenticated),
):
    changes = payload.model_dump(exclude_unset=True, mode="json")
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No profile fields provided.",
        )

    try:
        if "name" in changes:
            changes["name"] = normalize_name(changes["name"])
        if "phone" in changes:
            changes["phone"] = normalize_phone(changes["phone"])
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    try:
        updated = update_profile_row(
            access_token=auth.access_token,
            user_id=auth.user_id,
            payload=changes,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    updated_fields = sorted(changes)
    record_activity(
        auth.user_id,
        "profile_update",
        "Profile updated",
        {"updated_fields": updated_fields, "fields_count": len(updated_fields)},
    )
    return updated


@router.get("/bookings", response_model=MyBookingsResponse)
def get_my_bookings(
    status_filter: str | None = Query(
        default=None,
        alias="status",
        pattern="^(pending|confirmed|cancelled|completed)$",
    ),
    auth: AuthContext = Depends(require_authenticated),
):
    try:
        rows = list_user_bookings(user_id=auth.user_id, status_filter=status_filter)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "items": rows,
        "count": len(rows),
    }


@router.get("/activity", response_model=ActivityListResponse)
def get_my_activity(
    limit: int = Query(default=50, ge=1, le=200),
    auth: AuthContext = Depends(require_authenticated),
):
    try:
        rows, total = list_user_activity(user_id=auth.user_id, limit=limit)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "items": rows,
        "count": total,
    }


@router.get("/dashboard", response_model=UserDashboardResponse)
def get_my_dashboard(auth: AuthContext = Depends(require_authenticated)):
    profile = _load_profile(auth.user_id)
    try:
        bookings = list_user_bookings(user_id=auth.user_id)
        recent_activity, activity_total = list_user_activity(
            user_id=auth.user_id,
            limit=_RECENT_ACTIVITY_LIMIT,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "profile": profile,
        "booking_stats": compute_booking_stats(bookings),
        "activity_stats": {
            "total_activities": activity_total,
            "last_activity": recent_activity[0].get("created_at") if recent_activity else None,
            "registration_date": profile.get("created_at"),
        },
        "recent_activity": recent_activity,
    }
