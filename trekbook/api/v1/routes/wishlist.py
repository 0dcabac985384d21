from fastapi import APIRouter, Depends, HTTPException, status

from trekbook.core.auth import AuthContext, require_authenticated
from trekbook.core.errors import http_error_from_runtime_error
from trekbook.integrations.activity import record_activity
from trekbook.integrations.supabase_client import (
    add_to_wishlist as add_to_wishlist_row,
    get_active_package_by_id,
    is_in_wishlist,
    list_wishlist,
    remove_from_wishlist as remove_from_wishlist_row,
)
from trekbook.schemas.common import (
    WishlistAddRequest,
    WishlistItem,
    WishlistResponse,
    WishlistStatusResponse,
)

router = APIRouter()


@router.get("", response_model=WishlistResponse)
def get_wishlist(auth: AuthContext = Depends(require_authenticated)):
    try:
        rows = list_wishlist(auth.user_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {
        "items": rows,
        "count": len(rows),
    }


@router.post("", response_model=WishlistItem)
def post_wishlist_item(
    payload: WishlistAddRequest,
    auth: AuthContext = Depends(require_authenticated),
):
    try:
        package = get_active_package_by_id(payload.package_id)
        already_saved = package is not None and is_in_wishlist(
            user_id=auth.user_id,
            package_id=payload.package_id,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    if not package:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    if already_saved:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Package is already in your wishlist.",
        )

    try:
        created = add_to_wishlist_row(
            access_token=auth.access_token,
            user_id=auth.user_id,
            package_id=payload.package_id,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    record_activity(
        auth.user_id,
        "wishlist_add",
        f"Saved {package.get('title') or payload.package_id} to wishlist",
        {"package_id": payload.package_id},
    )
    return created


@router.get("/{package_id}", response_model=WishlistStatusResponse)
def get_wishlist_status(
    package_id: str,
    auth: AuthContext = Depends(require_authenticated),
):
    try:
        saved = is_in_wishlist(user_id=auth.user_id, package_id=package_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return {"package_id": package_id, "in_wishlist": saved}


@router.delete("/{package_id}", response_model=WishlistStatusResponse)
def delete_wishlist_item(
    package_id: str,
    auth: AuthContext = Depends(require_authenticated),
):
    try:
        remove_from_wishlist_row(
            access_token=auth.access_token,
            user_id=auth.user_id,
            package_id=package_id,
        )
    except RuntimeError as exc:
        raise http_error_from_runtime_error(exc) from exc

    record_activity(
        auth.user_id,
        "wishlist_remove",
        "Removed package from wishlist",
        {"package_id": package_id},
    )
    return {"package_id": package_id, "in_wishlist": False}
