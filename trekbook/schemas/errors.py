from typing import Any

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    correlation_id: str = "n/a"


class ErrorEnvelope(BaseModel):
    error: ErrorBody


def error_envelope(
    code: str,
    message: str,
    *,
    correlation_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return ErrorEnvelope(
        error=ErrorBody(
            code=code,
            message=message,
            details=details or {},
            correlation_id=correlation_id or "n/a",
        )
    ).model_dump()
