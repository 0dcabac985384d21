from datetime import date, datetime, timezone
from functools import lru_cache
from time import perf_counter
from typing import Any

from supabase import Client, create_client

from trekbook.core.catalog import normalize_itinerary
from trekbook.core.config import settings
from trekbook.core.status import normalize_booking_status_row
from trekbook.observability.perf_metrics import perf_metrics


def _can_connect() -> bool:
    return bool(settings.supabase_url and settings.supabase_service_role_key)


def _runtime_error_from_exception(exc: Exception) -> RuntimeError:
    message = getattr(exc, "message", None) or str(exc) or "Supabase request failed."
    details = getattr(exc, "details", None)
    hint = getattr(exc, "hint", None)
    parts = [str(message).strip()]
    if details:
        parts.append(f"Details: {details}")
    if hint:
        parts.append(f"Hint: {hint}")
    return RuntimeError(" ".join(part for part in parts if part))


def _timed_execute(metric_key: str, operation):
    start = perf_counter()
    try:
        return operation()
    finally:
        perf_metrics.record_db(metric_key, (perf_counter() - start) * 1000)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    if not _can_connect():
        raise RuntimeError("Supabase integration not configured.")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


def get_supabase_user_scoped_client(access_token: str) -> Client:
    if not _can_connect():
        raise RuntimeError("Supabase integration not configured.")
    if not access_token:
        raise RuntimeError("Missing access token for user-scoped Supabase client.")
    client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    client.postgrest.auth(access_token)
    return client


def _get_auth_client() -> Client:
    # Sign-in and sign-up attach a session to the client, so they never touch the shared one.
    if not _can_connect():
        raise RuntimeError("Supabase integration not configured.")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


PACKAGE_SELECT = """
    *,
    itinerary_days(
        day_number,
        title,
        description,
        activities
    )
"""

BOOKING_DETAIL_SELECT = """
    *,
    package:trek_packages!bookings_package_id_fkey(
        id,
        title,
        location,
        duration,
        difficulty,
        price,
        images
    ),
    customer:profiles!bookings_user_id_fkey(
        id,
        name,
        email,
        phone
    )
"""

MY_BOOKING_SELECT = """
    *,
    package:trek_packages!bookings_package_id_fkey(
        title,
        location,
        duration,
        difficulty,
        images
    )
"""

WISHLIST_SELECT = """
    *,
    package:trek_packages(
        title,
        location,
        duration,
        difficulty,
        price,
        images,
        rating,
        total_reviews
    )
"""

REVIEW_SELECT = """
    *,
    reviewer:profiles(
        name,
        avatar_url
    )
"""

BOOKING_STATS_SELECT = "status,total_amount,created_at"


def _first(response) -> dict[str, Any] | None:
    rows = response.data or []
    return rows[0] if rows else None


def _normalize_booking_row(row: dict[str, Any]) -> dict[str, Any]:
    return normalize_booking_status_row(row)


def _count_rows(table: str, *, column: str = "id", filters: dict[str, Any] | None = None) -> int:
    client = get_supabase_client()
    query = client.table(table).select(column, count="exact")
    for key, value in (filters or {}).items():
        query = query.eq(key, value)
    response = _timed_execute(f"db.{table}.count", lambda: query.limit(1).execute())
    return int(response.count or 0)


def _replace_itinerary(client: Client, package_id: str, itinerary: list[dict[str, Any]]) -> None:
    client.table("itinerary_days").delete().eq("package_id", package_id).execute()
    if not itinerary:
        return
    client.table("itinerary_days").insert(
        [
            {
                "package_id": package_id,
                "day_number": int(day.get("day") or index + 1),
                "title": day.get("title") or "",
                "description": day.get("description") or "",
                "activities": list(day.get("activities") or []),
            }
            for index, day in enumerate(itinerary)
        ]
    ).execute()


# Trek packages


def list_active_packages() -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        query = (
            client.table("trek_packages")
            .select(PACKAGE_SELECT)
            .eq("is_active", True)
            .order("rating", desc=True)
        )
        response = _timed_execute("db.packages.list_active", lambda: query.execute())
        return [normalize_itinerary(row) for row in (response.data or [])]
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def get_active_package_by_id(package_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = (
            client.table("trek_packages")
            .select(PACKAGE_SELECT)
            .eq("id", package_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        row = _first(response)
        return normalize_itinerary(row) if row else None
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def get_package_by_id(package_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = (
            client.table("trek_packages")
            .select(PACKAGE_SELECT)
            .eq("id", package_id)
            .limit(1)
            .execute()
        )
        row = _first(response)
        return normalize_itinerary(row) if row else None
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def list_all_packages_admin() -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        query = client.table("trek_packages").select(PACKAGE_SELECT).order("created_at", desc=True)
        response = _timed_execute("db.packages.list_admin", lambda: query.execute())
        return [normalize_itinerary(row) for row in (response.data or [])]
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def create_package(*, payload: dict[str, Any], itinerary: list[dict[str, Any]]) -> dict[str, Any]:
    try:
        client = get_supabase_client()
        response = client.table("trek_packages").insert(payload).execute()
        created = _first(response)
        if not created:
            raise RuntimeError("Package creation returned no data.")
        package_id = str(created["id"])
        _replace_itinerary(client, package_id, itinerary)
        return get_package_by_id(package_id) or normalize_itinerary(created)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def update_package(
    *,
    package_id: str,
    payload: dict[str, Any],
    itinerary: list[dict[str, Any]] | None = None,
) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        if payload:
            client.table("trek_packages").update(
                {**payload, "updated_at": _utc_now_iso()}
            ).eq("id", package_id).execute()
        if itinerary is not None:
            _replace_itinerary(client, package_id, itinerary)
        return get_package_by_id(package_id)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def update_package_status(*, package_id: str, is_active: bool) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        client.table("trek_packages").update(
            {"is_active": is_active, "updated_at": _utc_now_iso()}
        ).eq("id", package_id).execute()
        return get_package_by_id(package_id)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def package_has_bookings(package_id: str) -> bool:
    try:
        return _count_rows("bookings", filters={"package_id": package_id}) > 0
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def delete_package(*, package_id: str) -> bool:
    try:
        client = get_supabase_client()
        client.table("itinerary_days").delete().eq("package_id", package_id).execute()
        client.table("package_availability").delete().eq("package_id", package_id).execute()
        client.table("wishlists").delete().eq("package_id", package_id).execute()
        response = client.table("trek_packages").delete().eq("id", package_id).execute()
        return bool(response.data)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def count_active_packages() -> int:
    try:
        return _count_rows("trek_packages", filters={"is_active": True})
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


# Package availability


def list_package_availability(*, package_id: str, from_date: date) -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        query = (
            client.table("package_availability")
            .select("*")
            .eq("package_id", package_id)
            .gte("available_date", from_date.isoformat())
            .order("available_date", desc=False)
        )
        response = _timed_execute("db.availability.list", lambda: query.execute())
        return response.data or []
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def get_availability_by_id(availability_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = (
            client.table("package_availability")
            .select("*")
            .eq("id", availability_id)
            .limit(1)
            .execute()
        )
        return _first(response)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def create_availability(*, package_id: str, available_date: date, max_bookings: int) -> dict[str, Any]:
    try:
        client = get_supabase_client()
        response = (
            client.table("package_availability")
            .insert(
                {
                    "package_id": package_id,
                    "available_date": available_date.isoformat(),
                    "max_bookings": max_bookings,
                    "current_bookings": 0,
                    "is_available": True,
                }
            )
            .execute()
        )
        created = _first(response)
        if not created:
            raise RuntimeError("Availability creation returned no data.")
        return created
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def update_availability(*, availability_id: str, payload: dict[str, Any]) -> dict[str, Any] | None:
    try:
        if not payload:
            return None
        client = get_supabase_client()
        client.table("package_availability").update(payload).eq("id", availability_id).execute()
        return get_availability_by_id(availability_id)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def delete_availability(*, availability_id: str) -> None:
    try:
        client = get_supabase_client()
        client.table("package_availability").delete().eq("id", availability_id).execute()
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def book_package_date(*, access_token: str, package_id: str, available_date: date) -> dict[str, Any] | None:
    try:
        client = get_supabase_user_scoped_client(access_token)
        response = client.rpc(
            "book_package_date",
            {
                "p_package_id": package_id,
                "p_date": available_date.isoformat(),
            },
        ).execute()
        data = response.data
        if isinstance(data, list):
            return data[0] if data else None
        return data if isinstance(data, dict) else None
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


# Bookings


def create_booking_atomic(
    *,
    access_token: str,
    user_id: str,
    package_id: str,
    start_date: date,
    group_size: int,
    total_amount: float,
    special_requests: str | None = None,
) -> dict[str, Any]:
    try:
        client = get_supabase_user_scoped_client(access_token)
        response = client.rpc(
            "create_booking_atomic",
            {
                "p_user_id": user_id,
                "p_package_id": package_id,
                "p_start_date": start_date.isoformat(),
                "p_group_size": group_size,
                "p_total_amount": total_amount,
                "p_special_requests": special_requests,
            },
        ).execute()
        data = response.data
        rows = data if isinstance(data, list) else [data] if isinstance(data, dict) else []
        if not rows:
            raise RuntimeError("Booking creation returned no data.")
        return _normalize_booking_row(rows[0])
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def get_booking_by_id(booking_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = (
            client.table("bookings")
            .select(BOOKING_DETAIL_SELECT)
            .eq("id", booking_id)
            .limit(1)
            .execute()
        )
        row = _first(response)
        return _normalize_booking_row(row) if row else None
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def list_user_bookings(*, user_id: str, status_filter: str | None = None) -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        query = (
            client.table("bookings")
            .select(MY_BOOKING_SELECT)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        if status_filter:
            query = query.eq("status", status_filter)
        response = _timed_execute("db.bookings.list_user", lambda: query.execute())
        return [_normalize_booking_row(row) for row in (response.data or [])]
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def _matches_booking_search(row: dict[str, Any], search_term: str) -> bool:
    customer = row.get("customer") or {}
    package = row.get("package") or {}
    haystacks = [
        str(row.get("booking_reference") or "").lower(),
        str(row.get("id") or "").lower(),
        str(customer.get("name") or "").lower(),
        str(customer.get("email") or "").lower(),
        str(package.get("title") or "").lower(),
    ]
    return any(search_term in value for value in haystacks)


def list_all_bookings(
    *,
    limit: int = 20,
    offset: int = 0,
    status_filter: str | None = None,
    search: str | None = None,
) -> tuple[list[dict[str, Any]], int]:
    try:
        client = get_supabase_client()
        base_query = (
            client.table("bookings")
            .select(BOOKING_DETAIL_SELECT, count="exact")
            .order("created_at", desc=True)
            .order("id", desc=True)
        )
        if status_filter:
            base_query = base_query.eq("status", status_filter)

        search_term = (search or "").strip().lower()
        if not search_term:
            response = _timed_execute(
                "db.bookings.list_all.page",
                lambda: base_query.range(offset, offset + limit - 1).execute(),
            )
            rows = [_normalize_booking_row(row) for row in (response.data or [])]
            return rows, int(response.count or 0)

        # Search spans joined customer and package columns, so it filters a bounded scan.
        response = _timed_execute(
            "db.bookings.list_all.search_scan",
            lambda: base_query.range(0, 999).execute(),
        )
        filtered = [
            _normalize_booking_row(row)
            for row in (response.data or [])
            if _matches_booking_search(row, search_term)
        ]
        return filtered[offset : offset + limit], len(filtered)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def list_bookings_for_stats() -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        response = _timed_execute(
            "db.bookings.stats_scan",
            lambda: client.table("bookings").select(BOOKING_STATS_SELECT).execute(),
        )
        return response.data or []
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def update_booking_status(
    *,
    access_token: str,
    booking_id: str,
    status: str,
    expected_status: str,
) -> dict[str, Any] | None:
    """Move a booking from ``expected_status`` to ``status``.

    Returns ``None`` when the stored status no longer matches, so a concurrent
    cancellation is never overwritten.
    """
    try:
        client = get_supabase_user_scoped_client(access_token)
        response = (
            client.table("bookings")
            .update({"status": status, "updated_at": _utc_now_iso()})
            .eq("id", booking_id)
            .eq("status", expected_status)
            .execute()
        )
        if not response.data:
            return None
        return get_booking_by_id(booking_id)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def record_booking_payment(*, access_token: str, booking_id: str, payment_id: str) -> dict[str, Any] | None:
    # Only a pending, unpaid booking accepts a payment.
    try:
        client = get_supabase_user_scoped_client(access_token)
        response = (
            client.table("bookings")
            .update(
                {
                    "payment_id": payment_id,
                    "payment_status": "completed",
                    "updated_at": _utc_now_iso(),
                }
            )
            .eq("id", booking_id)
            .eq("status", "pending")
            .eq("payment_status", "pending")
            .execute()
        )
        if not response.data:
            return None
        return get_booking_by_id(booking_id)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def cancel_booking(*, access_token: str, booking_id: str) -> None:
    try:
        client = get_supabase_user_scoped_client(access_token)
        client.rpc("cancel_booking", {"p_booking_id": booking_id}).execute()
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


# Reviews


def list_package_reviews(package_id: str) -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        response = (
            client.table("reviews")
            .select(REVIEW_SELECT)
            .eq("package_id", package_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def get_review_by_booking(booking_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = client.table("reviews").select("*").eq("booking_id", booking_id).limit(1).execute()
        return _first(response)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def get_review_by_id(review_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = client.table("reviews").select("*").eq("id", review_id).limit(1).execute()
        return _first(response)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def create_review(*, access_token: str, payload: dict[str, Any]) -> dict[str, Any]:
    try:
        client = get_supabase_user_scoped_client(access_token)
        response = client.table("reviews").insert(payload).execute()
        created = _first(response)
        if not created:
            raise RuntimeError("Review creation returned no data.")
        return created
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def update_review(*, access_token: str, review_id: str, payload: dict[str, Any]) -> dict[str, Any] | None:
    try:
        client = get_supabase_user_scoped_client(access_token)
        client.table("reviews").update(
            {**payload, "updated_at": _utc_now_iso()}
        ).eq("id", review_id).execute()
        return get_review_by_id(review_id)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


# Wishlist


def list_wishlist(user_id: str) -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        response = (
            client.table("wishlists")
            .select(WISHLIST_SELECT)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def is_in_wishlist(*, user_id: str, package_id: str) -> bool:
    try:
        client = get_supabase_client()
        response = (
            client.table("wishlists")
            .select("id")
            .eq("user_id", user_id)
            .eq("package_id", package_id)
            .limit(1)
            .execute()
        )
        return bool(response.data)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def add_to_wishlist(*, access_token: str, user_id: str, package_id: str) -> dict[str, Any]:
    try:
        client = get_supabase_user_scoped_client(access_token)
        response = client.table("wishlists").insert({"user_id": user_id, "package_id": package_id}).execute()
        created = _first(response)
        if not created:
            raise RuntimeError("Wishlist insert returned no data.")
        return created
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def remove_from_wishlist(*, access_token: str, user_id: str, package_id: str) -> None:
    try:
        client = get_supabase_user_scoped_client(access_token)
        client.table("wishlists").delete().eq("user_id", user_id).eq("package_id", package_id).execute()
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


# Profiles & activity


def get_profile(user_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = client.table("profiles").select("*").eq("id", user_id).limit(1).execute()
        return _first(response)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def update_profile(*, access_token: str, user_id: str, payload: dict[str, Any]) -> dict[str, Any] | None:
    try:
        client = get_supabase_user_scoped_client(access_token)
        client.table("profiles").update({**payload, "updated_at": _utc_now_iso()}).eq("id", user_id).execute()
        return get_profile(user_id)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def count_profiles() -> int:
    try:
        return _count_rows("profiles")
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def log_user_activity(
    *,
    user_id: str,
    activity_type: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    try:
        client = get_supabase_client()
        client.rpc(
            "log_user_activity",
            {
                "p_user_id": user_id,
                "p_activity_type": activity_type,
                "p_description": description,
                "p_metadata": metadata or {},
            },
        ).execute()
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def list_user_activity(*, user_id: str, limit: int = 50) -> tuple[list[dict[str, Any]], int]:
    try:
        client = get_supabase_client()
        response = (
            client.table("user_activity_log")
            .select("*", count="exact")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or [], int(response.count or 0)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


# Messaging


def list_message_templates(message_type: str | None = None) -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        query = client.table("message_templates").select("*").eq("is_active", True)
        if message_type:
            query = query.eq("type", message_type)
        response = query.order("created_at", desc=True).execute()
        return response.data or []
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def insert_message_log(payload: dict[str, Any]) -> None:
    try:
        client = get_supabase_client()
        client.table("message_logs").insert(payload).execute()
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def list_booking_message_logs(booking_id: str) -> list[dict[str, Any]]:
    try:
        client = get_supabase_client()
        response = (
            client.table("message_logs")
            .select("*")
            .eq("booking_id", booking_id)
            .order("sent_at", desc=True)
            .execute()
        )
        return response.data or []
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def get_message_log(log_id: str) -> dict[str, Any] | None:
    try:
        client = get_supabase_client()
        response = client.table("message_logs").select("*").eq("id", log_id).limit(1).execute()
        return _first(response)
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


# Supabase Auth


def _session_payload(auth_response) -> dict[str, Any]:
    user = getattr(auth_response, "user", None)
    session = getattr(auth_response, "session", None)
    return {
        "user": {
            "id": str(getattr(user, "id", "") or ""),
            "email": getattr(user, "email", None),
        }
        if user
        else None,
        "access_token": getattr(session, "access_token", None) if session else None,
        "refresh_token": getattr(session, "refresh_token", None) if session else None,
        "expires_in": getattr(session, "expires_in", None) if session else None,
    }


def sign_up_user(*, email: str, password: str, name: str, phone: str | None) -> dict[str, Any]:
    try:
        client = _get_auth_client()
        response = client.auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {"data": {"name": name, "phone": phone}},
            }
        )
        return _session_payload(response)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def sign_in_user(*, email: str, password: str) -> dict[str, Any]:
    try:
        client = _get_auth_client()
        response = client.auth.sign_in_with_password({"email": email, "password": password})
        return _session_payload(response)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def sign_out_user(*, access_token: str) -> None:
    try:
        client = get_supabase_client()
        client.auth.admin.sign_out(access_token)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def send_password_reset(*, email: str, redirect_to: str) -> None:
    try:
        client = _get_auth_client()
        client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc


def update_user_password(*, user_id: str, password: str) -> None:
    try:
        client = get_supabase_client()
        client.auth.admin.update_user_by_id(user_id, {"password": password})
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise _runtime_error_from_exception(exc) from exc
