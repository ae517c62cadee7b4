from pydantic import BaseModel
from uuid import UUID
import datetime as dt
from typing import Any, Optional


class SummaryStats(BaseModel):
    total_revenue: int
    total_fees: int
    net_revenue: int
    refunded_amount: int
    total_transactions: int
    total_customers: int
    active_subscriptions: int
    mrr: int


class TrendPoint(BaseModel):
    date: dt.date
    revenue: int  # minor units


class MonthlyRevenue(BaseModel):
    month: dt.date
    project_id: UUID
    project_name: str
    total_revenue: int
    total_fees: int
    net_revenue: int
    paying_customers: int


class ActiveSubscriptions(BaseModel):
    project_id: UUID
    project_name: str
    total_active: int
    mrr: int
    scheduled_cancellations: int


class CustomerStats(BaseModel):
    project_id: UUID
    project_name: str
    total_customers: int
    new_customers: int
    customers_with_subscriptions: int
    window_start: dt.datetime


class SnapshotRead(BaseModel):
    date: dt.date
    total_revenue: Optional[int] = None
    total_fees: Optional[int] = None
    net_revenue: Optional[int] = None
    new_customers: Optional[int] = None
    new_subscriptions: Optional[int] = None
    churned_subscriptions: Optional[int] = None
    total_transactions: Optional[int] = None
    failed_transactions: Optional[int] = None

    class Config:
        from_attributes = True


class AuditLogRead(BaseModel):
    id: UUID
    entity_type: Optional[str] = None
    entity_id: Optional[UUID] = None
    action: Optional[str] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    user_ip: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class WebhookLogRead(BaseModel):
    id: UUID
    gateway_name: Optional[str] = None
    event_type: Optional[str] = None
    payload: Optional[dict[str, Any]] = None
    status: Optional[str] = None
    error_message: Optional[str] = None
    retry_count: Optional[int] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
