import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from athena.api.dependencies import get_scheduler
from athena.middleware.auth_middleware import get_current_user_id
from athena.models.dashboard import DashboardResponse, RefreshResponse
from athena.services.dashboard_scheduler import DashboardScheduler
from athena.services.rss_service import filter_claims

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/rss", response_model=DashboardResponse)
async def get_rss_dashboard(
    category: Optional[str] = Query(None),
    source_type: Optional[str] = Query(None),
    verification_status: Optional[str] = Query(None, pattern="^(all|verified|pending)$"),
    search: Optional[str] = Query(None),
    time_range: Optional[str] = Query(None, pattern="^(all|24h|7d|30d)$"),
    user_id: str = Depends(get_current_user_id),
    scheduler: DashboardScheduler = Depends(get_scheduler)
):
    """
    Current dashboard snapshot, optionally filtered.

    Stats always describe the whole snapshot, not the filtered claims.
    """
    try:
        snapshot = await scheduler.get_snapshot()
    except Exception:
        logger.exception("[Dashboard] RSS feed API error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch RSS feed data")

    claims = filter_claims(
        snapshot.claims,
        category=category,
        source_type=source_type,
        verification_status=verification_status,
        search=search,
        time_range=time_range
    )

    return DashboardResponse(
        claims=claims,
        articles=snapshot.articles,
        stats=snapshot.stats,
        last_update=snapshot.last_update
    )


@router.post("/rss/refresh", response_model=RefreshResponse)
async def refresh_rss_dashboard(
    user_id: str = Depends(get_current_user_id),
    scheduler: DashboardScheduler = Depends(get_scheduler)
):
    try:
        snapshot = await scheduler.refresh()
    except Exception:
        logger.exception("[Dashboard] RSS feed refresh error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to refresh RSS feed")

    return RefreshResponse(claims=snapshot.claims, stats=snapshot.stats, last_update=snapshot.last_update)


@router.get("/scheduler")
async def scheduler_status(
    user_id: str = Depends(get_current_user_id),
    scheduler: DashboardScheduler = Depends(get_scheduler)
):
    return scheduler.get_status()
