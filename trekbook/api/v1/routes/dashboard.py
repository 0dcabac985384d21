from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from trekbook.core.auth import AuthContext, require_admin
from trekbook.core.stats import compute_admin_stats
from trekbook.integrations.supabase_client import (
    count_active_packages,
    count_profiles,
    list_bookings_for_stats,
)
from trekbook.observability.perf_metrics import perf_metrics
from trekbook.schemas.common import AdminStatsResponse

router = APIRouter()


@router.get("/stats", response_model=AdminStatsResponse)
def get_dashboard_stats(_auth: AuthContext = Depends(require_admin)):
    try:
        bookings = list_bookings_for_stats()
        total_packages = count_active_packages()
        total_users = count_profiles()
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return compute_admin_stats(
        bookings,
        total_packages=total_packages,
        total_users=total_users,
        today=date.today(),
    )


@router.get("/perf")
def get_dashboard_performance_snapshot(
    _: AuthContext = Depends(require_admin),
):
    return perf_metrics.snapshot()
