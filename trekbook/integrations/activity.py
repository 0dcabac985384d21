import logging
from typing import Any

from trekbook.integrations.supabase_client import log_user_activity

logger = logging.getLogger(__name__)


def record_activity(
    user_id: str,
    activity_type: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> bool:
    try:
        log_user_activity(
            user_id=user_id,
            activity_type=activity_type,
            description=description,
            metadata=metadata,
        )
    except RuntimeError:
        # Activity history is best-effort and never blocks the user action.
        logger.exception("User activity log failed (user_id=%s, type=%s)", user_id, activity_type)
        return False
    return True
