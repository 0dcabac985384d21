import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from trekbook.core.auth import AuthContext, require_admin
from trekbook.integrations.messaging import retry_message
from trekbook.integrations.supabase_client import get_message_log, list_message_templates
from trekbook.schemas.common import MessageRetryResponse, MessageTemplateListResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/templates", response_model=MessageTemplateListResponse)
def get_message_templates(
    message_type: str | None = Query(default=None, alias="type", pattern="^(email|whatsapp)$"),
    _auth: AuthContext = Depends(require_admin),
):
    try:
        rows = list_message_templates(message_type)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "items": rows,
        "count": len(rows),
    }


@router.post("/{log_id}/retry", response_model=MessageRetryResponse)
def post_message_retry(
    log_id: str,
    auth: AuthContext = Depends(require_admin),
):
    try:
        message_log = get_message_log(log_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not message_log:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message log not found")

    sent = retry_message(message_log)
    logger.info("Message retry (log_id=%s, sent=%s, by=%s)", log_id, sent, auth.user_id)
    return {"ok": True, "message_log_id": log_id, "sent": sent}
