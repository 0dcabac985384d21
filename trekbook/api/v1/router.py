from fastapi import APIRouter

from trekbook.api.v1.routes import (
    admin_packages,
    auth,
    availability,
    bookings,
    dashboard,
    me,
    messages,
    packages,
    reviews,
    wishlist,
)

router = APIRouter(prefix="/v1")
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(wishlist.router, prefix="/me/wishlist", tags=["wishlist"])
router.include_router(me.router, prefix="/me", tags=["me"])
router.include_router(packages.router, prefix="/packages", tags=["packages"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
router.include_router(admin_packages.router, prefix="/admin/packages", tags=["admin"])
router.include_router(availability.router, prefix="/admin", tags=["availability"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(messages.router, prefix="/messages", tags=["messages"])
