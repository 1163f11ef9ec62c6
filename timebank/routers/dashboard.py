from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from timebank.database import get_db
from timebank.core.auth import get_current_user
from timebank.models.profile import Profile
from timebank.schemas.dashboard import DashboardResponse, KPIStats, RankingsResponse, WeeklyData
from timebank.services.normalize import current_month
from timebank.services.dashboard import (
    get_evaluation_trends,
    get_kpi_stats,
    get_latest_quarterly_summary,
    get_recent_activities,
    get_tag_distribution,
    get_top_by_value_score,
    get_top_contributors,
    get_user_value_score,
    get_user_weekly_data,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    month = current_month()

    # One session, so the reads run one after another
    return DashboardResponse(
        month=month,
        kpi=await get_kpi_stats(db, current_user.id),
        weekly=await get_user_weekly_data(db, current_user.id, 12),
        tags=await get_tag_distribution(db, 10),
        top_contributors=await get_top_contributors(db, month, 10),
        top_by_value_score=await get_top_by_value_score(db, month, 10),
        my_value_score=await get_user_value_score(db, current_user.id, month),
        quarterly_summary=await get_latest_quarterly_summary(db, current_user.id),
        evaluation_trends=await get_evaluation_trends(db, current_user.id),
        recent_activities=await get_recent_activities(db, 5),
    )


@router.get("/kpi", response_model=KPIStats)
async def get_my_kpi(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    return await get_kpi_stats(db, current_user.id)


@router.get("/weekly", response_model=list[WeeklyData])
async def get_my_weekly(
    limit: int = Query(12, ge=1, le=52),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    return await get_user_weekly_data(db, current_user.id, limit)


@router.get("/rankings", response_model=RankingsResponse)
async def get_rankings(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    month = current_month()
    return RankingsResponse(
        month=month,
        top_contributors=await get_top_contributors(db, month, limit),
        top_by_value_score=await get_top_by_value_score(db, month, limit),
    )
