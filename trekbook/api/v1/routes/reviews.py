from fastapi import APIRouter, Depends, HTTPException, status

from trekbook.core.auth import AuthContext, require_authenticated
from trekbook.core.errors import http_error_from_runtime_error
from trekbook.integrations.supabase_client import (
    get_review_by_id,
    update_review as update_review_row,
)
from trekbook.schemas.common import ReviewItem, ReviewUpdateRequest

router = APIRouter()


@router.patch("/{review_id}", response_model=ReviewItem)
def patch_review(
    review_id: str,
    payload: ReviewUpdateRequest,
    auth: AuthContext = Depends(require_authenticated),
):
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No review fields provided.",
        )
    if "comment" in changes:
        changes["comment"] = changes["comment"].strip()

    try:
        existing = get_review_by_id(review_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if not existing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    if existing.get("user_id") != auth.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only edit your own reviews.",
        )

    try:
        updated = update_review_row(
            access_token=auth.access_token,
            review_id=review_id,
            payload=changes,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    return updated
