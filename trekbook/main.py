import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from trekbook.api.v1.router import router as v1_router
from trekbook.core.config import settings
from trekbook.middleware.correlation import CorrelationIdMiddleware
from trekbook.middleware.performance import ApiPerformanceMiddleware
from trekbook.schemas.errors import error_envelope

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(ApiPerformanceMiddleware)
logger = logging.getLogger(__name__)

cors_origins = [
    origin.strip()
    for origin in settings.api_cors_allowed_origins.split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins or ["http://localhost:5173"],
    allow_credentials=settings.api_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1024)

app.include_router(v1_router)


@app.get("/health")
def health():
    return {
        "ok": True,
        "service": settings.app_name,
        "env": settings.app_env,
        "api_version": settings.api_version,
        "supabase_configured": bool(
            settings.supabase_url and settings.supabase_service_role_key
        ),
        "booking_notifications_enabled": settings.feature_booking_notifications,
        "messaging": {
            "whatsapp_configured": bool(settings.whatsapp_api_url),
            "email_configured": bool(settings.email_api_url),
        },
    }


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, "correlation_id", "n/a")
    logger.exception(
        "Unhandled error on %s %s (correlation_id=%s)",
        request.method,
        request.url.path,
        correlation_id,
    )
    return JSONResponse(
        status_code=500,
        content=error_envelope(
            "internal_error",
            str(exc),
            correlation_id=correlation_id,
        ),
    )
