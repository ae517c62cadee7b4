# billing_dashboard/models/snapshot.py
import uuid
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Uuid, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.sql import func
from billing_dashboard.database import Base


class DailyRevenueSnapshot(Base):
    """Pre-aggregated per-day counters, written by the ingestion side."""

    __tablename__ = "daily_revenue_snapshots"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)

    total_revenue = Column(Integer, default=0)  # gross, succeeded only
    total_fees = Column(Integer, default=0)
    net_revenue = Column(Integer, default=0)
    new_customers = Column(Integer, default=0)
    new_subscriptions = Column(Integer, default=0)
    churned_subscriptions = Column(Integer, default=0)
    total_transactions = Column(Integer, default=0)
    failed_transactions = Column(Integer, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("project_id", "date"),
        CheckConstraint(
            "total_revenue >= 0 AND total_fees >= 0 AND net_revenue >= 0 AND "
            "new_customers >= 0 AND new_subscriptions >= 0 AND churned_subscriptions >= 0",
            name="amount_checks",
        ),
        Index("idx_daily_snapshots_project", "project_id"),
        Index("idx_daily_snapshots_date", "date"),
        Index("idx_daily_snapshots_project_date", "project_id", "date"),
    )
