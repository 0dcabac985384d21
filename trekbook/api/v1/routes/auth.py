import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from trekbook.core.auth import (
    AuthContext,
    forget_access_token,
    require_authenticated,
    verify_access_token,
)
from trekbook.core.config import settings
from trekbook.core.errors import http_error_from_runtime_error
from trekbook.core.validation import (
    ValidationError,
    normalize_email,
    normalize_name,
    normalize_phone,
    validate_password,
)
from trekbook.integrations.supabase_client import (
    send_password_reset,
    sign_in_user,
    sign_out_user,
    sign_up_user,
    update_user_password,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class SignUpRequest(BaseModel):
    email: str
    password: str
    name: str
    phone: str | None = None


class SignInRequest(BaseModel):
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    email: str


class PasswordUpdateRequest(BaseModel):
    password: str


class AuthUser(BaseModel):
    id: str
    email: str | None = None


class AuthSessionResponse(BaseModel):
    user: AuthUser | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None


class OkResponse(BaseModel):
    ok: bool = True


class SessionRequest(BaseModel):
    supabase_access_token: str


class SessionResponse(BaseModel):
    session_id: str
    user: dict


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.post("/signup", response_model=AuthSessionResponse)
def sign_up(payload: SignUpRequest):
    try:
        email = normalize_email(payload.email)
        password = validate_password(payload.password)
        name = normalize_name(payload.name)
        phone = normalize_phone(payload.phone)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    try:
        result = sign_up_user(email=email, password=password, name=name, phone=phone)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    logger.info("User signed up (email=%s)", email)
    return result


@router.post("/signin", response_model=AuthSessionResponse)
def sign_in(payload: SignInRequest):
    try:
        email = normalize_email(payload.email)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    if not payload.password:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Password is required",
        )

    try:
        result = sign_in_user(email=email, password=payload.password)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc, default=status.HTTP_401_UNAUTHORIZED) from exc

    if not result.get("access_token"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    return result


@router.post("/signout", response_model=OkResponse)
def sign_out(auth: AuthContext = Depends(require_authenticated)):
    try:
        sign_out_user(access_token=auth.access_token)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    forget_access_token(auth.access_token)
    return {"ok": True}


@router.post("/password/reset", response_model=OkResponse)
def request_password_reset(payload: PasswordResetRequest):
    try:
        email = normalize_email(payload.email)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    try:
        send_password_reset(email=email, redirect_to=settings.password_reset_redirect_url)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    return {"ok": True}


@router.post("/password", response_model=OkResponse)
def update_password(
    payload: PasswordUpdateRequest,
    auth: AuthContext = Depends(require_authenticated),
):
    try:
        password = validate_password(payload.password)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    try:
        update_user_password(user_id=auth.user_id, password=password)
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    logger.info("Password updated (user_id=%s)", auth.user_id)
    return {"ok": True}


@router.post("/session", response_model=SessionResponse)
def create_session(payload: SessionRequest):
    auth = verify_access_token(payload.supabase_access_token)
    return SessionResponse(
        session_id=f"session-{auth.user_id}",
        user={"id": auth.user_id, "role": auth.role, "email": auth.email},
    )


@router.get("/context")
def get_context(auth: AuthContext = Depends(require_authenticated)):
    return {
        "user_id": auth.user_id,
        "email": auth.email,
        "role": auth.role,
    }
