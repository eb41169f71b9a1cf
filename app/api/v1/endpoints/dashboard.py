from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.db.mongo import get_db
from app.models.user import UserResponse
from app.schemas.dashboard import AnalyticsPeriod, DashboardStats, SalesAnalyticsResponse
from app.services.dashboard_service import DashboardService

router = APIRouter()
sales_router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    """Counts, invoice totals, recent invoices and low-stock products."""
    return await DashboardService(db).stats()


@sales_router.get("/analytics", response_model=SalesAnalyticsResponse)
async def sales_analytics(
    period: AnalyticsPeriod = Query(AnalyticsPeriod.TODAY),
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    return await DashboardService(db).sales_analytics(period)
