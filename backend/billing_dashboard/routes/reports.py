from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from billing_dashboard.core.config import settings
from billing_dashboard.deps import get_db
from billing_dashboard.schemas.report import MonthlyRevenue, ActiveSubscriptions, CustomerStats
from billing_dashboard.services import analytics

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/monthly-revenue", response_model=list[MonthlyRevenue])
def monthly_revenue(project_id: Optional[UUID] = None, db: Session = Depends(get_db)):
    return analytics.monthly_revenue(db, project_id)


@router.get("/active-subscriptions", response_model=list[ActiveSubscriptions])
def active_subscriptions(project_id: Optional[UUID] = None, db: Session = Depends(get_db)):
    return analytics.active_subscriptions(db, project_id)


@router.get("/customer-stats", response_model=list[CustomerStats])
def customer_stats(
    project_id: Optional[UUID] = None,
    as_of: Optional[datetime] = None,
    days: int = Query(settings.CUSTOMER_STATS_WINDOW_DAYS, ge=1, le=366),
    db: Session = Depends(get_db),
):
    return analytics.customer_stats(
        db,
        as_of or datetime.now(timezone.utc),
        project_id=project_id,
        window_days=days,
    )
