from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from billing_dashboard.core.config import settings
from billing_dashboard.deps import get_db, get_project
from billing_dashboard.models.project import Project
from billing_dashboard.schemas.report import SummaryStats, TrendPoint
from billing_dashboard.services import analytics

router = APIRouter(prefix="/projects", tags=["Overview"])


@router.get("/{project_id}/summary", response_model=SummaryStats)
def project_summary(project: Project = Depends(get_project), db: Session = Depends(get_db)):
    """
    Summary cards for one project:
    - Revenue / fees: succeeded transactions only; net = revenue - fees
    - Refunds: succeeded refund transactions, shown separately, not netted
    - Counts: transactions (any status), customers, active subscriptions
    - MRR: sum of active subscription amounts
    """
    return analytics.summary_stats(db, project.id)


@router.get("/{project_id}/trend", response_model=list[TrendPoint])
def project_trend(
    end: Optional[datetime] = None,
    days: int = Query(settings.TREND_WINDOW_DAYS, ge=1, le=366),
    buckets: int = Query(settings.TREND_MAX_BUCKETS, ge=1, le=366),
    tz: str = settings.DEFAULT_TIMEZONE,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    try:
        analytics.resolve_timezone(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=422, detail=f"Unknown time zone: {tz}")

    return analytics.revenue_trend(
        db,
        project.id,
        end=end or datetime.now(timezone.utc),
        window_days=days,
        max_buckets=buckets,
        tz=tz,
    )
