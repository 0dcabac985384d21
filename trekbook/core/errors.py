from fastapi import HTTPException, status

from trekbook.core.availability import is_conflict_error


def http_status_from_runtime_error(exc: RuntimeError, *, default: int = status.HTTP_400_BAD_REQUEST) -> int:
    message = str(exc).lower()
    if "not configured" in message:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if is_conflict_error(message):
        return status.HTTP_409_CONFLICT
    return default


def http_error_from_runtime_error(
    exc: RuntimeError,
    *,
    default: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    return HTTPException(
        status_code=http_status_from_runtime_error(exc, default=default),
        detail=str(exc),
    )
