"""
Analytics API - dashboard and reports chart data.

Provides aggregated data for:
- Top-selling medicines
- Daily sales (last N days)
- Summary cards
- Recent invoice activity
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.models.user import User
from medbill.schemas.analytics import DailySales, DashboardSummary, RecentActivity, TopSellingMedicine
from medbill.services import analytics_service

router = APIRouter()


@router.get("/top-selling", response_model=List[TopSellingMedicine])
def top_selling(
    limit: int = Query(5, ge=1, le=100, description="Number of medicines to return"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analytics_service.get_top_selling_medicines(db, limit)


@router.get("/daily-sales", response_model=List[DailySales])
def daily_sales(
    days: int = Query(7, ge=1, le=366, description="Number of days to fetch"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analytics_service.get_daily_sales(db, days)


@router.get("/summary", response_model=DashboardSummary)
def summary(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics_service.get_dashboard_summary(db)


@router.get("/recent-activity", response_model=List[RecentActivity])
def recent_activity(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analytics_service.get_recent_activity(db, limit)
