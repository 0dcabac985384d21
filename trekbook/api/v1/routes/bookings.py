from datetime import date
import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status

from trekbook.core.auth import (
    AuthContext,
    ensure_booking_access,
    require_admin,
    require_authenticated,
)
from trekbook.core.availability import find_slot, is_open_slot
from trekbook.core.config import settings
from trekbook.core.errors import http_error_from_runtime_error
from trekbook.core.status import CANCELLABLE_STATUSES, can_transition, canonical_booking_status
from trekbook.integrations.activity import record_activity
from trekbook.integrations.messaging import send_booking_confirmation
from trekbook.integrations.supabase_client import (
    cancel_booking as cancel_booking_rpc,
    create_booking_atomic as create_booking_atomic_rpc,
    create_review as create_review_row,
    get_active_package_by_id,
    get_booking_by_id,
    get_review_by_booking,
    list_all_bookings,
    list_booking_message_logs,
    list_package_availability,
    record_booking_payment as record_booking_payment_row,
    update_booking_status as update_booking_status_row,
)
from trekbook.schemas.common import (
    BookingCreateRequest,
    BookingItem,
    BookingListResponse,
    BookingStatus,
    BookingStatusUpdateRequest,
    BookingStatusUpdateResponse,
    CancelBookingResponse,
    DemoPaymentRequest,
    DemoPaymentResponse,
    MessageLogListResponse,
    NotificationResult,
    ReviewCreateRequest,
    ReviewItem,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _load_booking(booking_id: str) -> dict:
    try:
        row = get_booking_by_id(booking_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return row


def _maybe_send_confirmation(booking_id: str) -> NotificationResult | None:
    if not settings.feature_booking_notifications:
        logger.info("Booking confirmation skipped: feature disabled (booking_id=%s)", booking_id)
        return None

    try:
        result = send_booking_confirmation(booking_id)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Booking confirmation failed (booking_id=%s)", booking_id)
        return NotificationResult(error=str(exc))
    return NotificationResult(whatsapp=result.get("whatsapp"), email=result.get("email"))


@router.post("", response_model=BookingItem)
def create_booking(
    payload: BookingCreateRequest,
    auth: AuthContext = Depends(require_authenticated),
):
    today = date.today()
    if payload.start_date < today:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_date cannot be in the past.",
        )

    try:
        package = get_active_package_by_id(payload.package_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    if not package:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Package not found or inactive.",
        )

    max_group_size = int(package.get("max_group_size") or 0)
    if payload.group_size > max_group_size:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"group_size cannot exceed {max_group_size} for this package.",
        )

    try:
        slots = list_package_availability(package_id=payload.package_id, from_date=payload.start_date)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    slot = find_slot(slots, payload.start_date)
    if not slot or not is_open_slot(slot, today=today):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Selected date is no longer available.",
        )

    total_amount = round(payload.group_size * float(package.get("price") or 0), 2)

    # The RPC re-checks capacity under a row lock; the check above only fails fast.
    try:
        created = create_booking_atomic_rpc(
            access_token=auth.access_token,
            user_id=auth.user_id,
            package_id=payload.package_id,
            start_date=payload.start_date,
            group_size=payload.group_size,
            total_amount=total_amount,
            special_requests=payload.special_requests,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    booking_id = str(created.get("id") or "")
    logger.info(
        "Booking created (booking_id=%s, package_id=%s, start_date=%s, group_size=%s)",
        booking_id,
        payload.package_id,
        payload.start_date.isoformat(),
        payload.group_size,
    )
    record_activity(
        auth.user_id,
        "booking_created",
        f"Booked {package.get('title') or payload.package_id}",
        {
            "booking_id": booking_id,
            "package_id": payload.package_id,
            "start_date": payload.start_date.isoformat(),
            "group_size": payload.group_size,
            "total_amount": total_amount,
        },
    )
    return created


@router.get("", response_model=BookingListResponse)
def get_bookings(
    limit: int = Query(default=20, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    status_filter: str | None = Query(
        default=None,
        alias="status",
        pattern="^(pending|confirmed|cancelled|completed)$",
    ),
    search: str | None = Query(default=None, max_length=120),
    _auth: AuthContext = Depends(require_admin),
):
    try:
        rows, total = list_all_bookings(
            limit=limit,
            offset=offset,
            status_filter=status_filter,
            search=search,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "items": rows,
        "count": total,
        "limit": limit,
        "offset": offset,
        "has_more": offset + len(rows) < total,
    }


@router.get("/{booking_id}", response_model=BookingItem)
def get_booking(
    booking_id: str,
    auth: AuthContext = Depends(require_authenticated),
):
    row = _load_booking(booking_id)
    ensure_booking_access(auth, row)
    return row


@router.post("/{booking_id}/payment", response_model=DemoPaymentResponse)
def pay_booking(
    booking_id: str,
    payload: DemoPaymentRequest | None = None,
    auth: AuthContext = Depends(require_authenticated),
):
    row = _load_booking(booking_id)
    if row.get("user_id") != auth.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not allowed to access this booking.",
        )

    if (
        canonical_booking_status(row.get("status")) != "pending"
        or str(row.get("payment_status") or "pending").lower() == "completed"
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Booking is not awaiting payment.",
        )

    payment_id = (payload.payment_id if payload else None) or f"demo-{uuid4().hex}"
    try:
        updated = record_booking_payment_row(
            access_token=auth.access_token,
            booking_id=booking_id,
            payment_id=payment_id,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Booking is not awaiting payment.",
        )

    logger.info("Demo payment recorded (booking_id=%s, payment_id=%s)", booking_id, payment_id)
    return {"ok": True, "booking": updated}


@router.post("/{booking_id}/cancel", response_model=CancelBookingResponse)
def cancel_booking(
    booking_id: str,
    auth: AuthContext = Depends(require_authenticated),
):
    row = _load_booking(booking_id)
    ensure_booking_access(auth, row)

    current_status = canonical_booking_status(row.get("status"))
    if current_status not in CANCELLABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Booking cannot be cancelled in its current status.",
        )

    try:
        cancel_booking_rpc(access_token=auth.access_token, booking_id=booking_id)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    record_activity(
        auth.user_id,
        "booking_cancelled",
        "Booking cancelled",
        {"booking_id": booking_id, "previous_status": current_status},
    )
    return {"ok": True, "booking_id": booking_id, "status": "cancelled"}


@router.patch("/{booking_id}/status", response_model=BookingStatusUpdateResponse)
def patch_booking_status(
    booking_id: str,
    payload: BookingStatusUpdateRequest,
    auth: AuthContext = Depends(require_admin),
):
    current = _load_booking(booking_id)
    current_status = canonical_booking_status(current.get("status"))
    target_status = payload.status.value

    if not can_transition(current_status, target_status):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change booking status from {current_status} to {target_status}.",
        )
    if current_status == target_status:
        return {"ok": True, "booking": current, "notifications": None}

    try:
        if payload.status == BookingStatus.CANCELLED:
            cancel_booking_rpc(access_token=auth.access_token, booking_id=booking_id)
            updated = get_booking_by_id(booking_id)
        else:
            updated = update_booking_status_row(
                access_token=auth.access_token,
                booking_id=booking_id,
                status=target_status,
                expected_status=current_status,
            )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc, default=status.HTTP_503_SERVICE_UNAVAILABLE) from exc

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Booking status changed while it was being updated; reload and try again.",
        )

    logger.info(
        "Booking status changed (booking_id=%s, from=%s, to=%s, by=%s)",
        booking_id,
        current_status,
        target_status,
        auth.user_id,
    )

    notifications = None
    if payload.status == BookingStatus.CONFIRMED and payload.notify:
        notifications = _maybe_send_confirmation(booking_id)

    return {"ok": True, "booking": updated, "notifications": notifications}


@router.get("/{booking_id}/messages", response_model=MessageLogListResponse)
def get_booking_messages(
    booking_id: str,
    _auth: AuthContext = Depends(require_admin),
):
    try:
        rows = list_booking_message_logs(booking_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "booking_id": booking_id,
        "items": rows,
        "count": len(rows),
    }


@router.post("/{booking_id}/review", response_model=ReviewItem)
def post_booking_review(
    booking_id: str,
    payload: ReviewCreateRequest,
    auth: AuthContext = Depends(require_authenticated),
):
    row = _load_booking(booking_id)
    if row.get("user_id") != auth.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the traveller who made this booking can review it.",
        )
    if canonical_booking_status(row.get("status")) != "completed":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Only completed bookings can be reviewed.",
        )

    try:
        existing = get_review_by_booking(booking_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This booking has already been reviewed.",
        )

    try:
        created = create_review_row(
            access_token=auth.access_token,
            payload={
                "user_id": auth.user_id,
                "package_id": row.get("package_id"),
                "booking_id": booking_id,
                "rating": payload.rating,
                "comment": payload.comment.strip(),
            },
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    record_activity(
        auth.user_id,
        "review_created",
        "Reviewed a completed trek",
        {"booking_id": booking_id, "package_id": row.get("package_id"), "rating": payload.rating},
    )
    return created
