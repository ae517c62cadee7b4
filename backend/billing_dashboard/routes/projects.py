from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr
from sqlalchemy.orm import Session

from billing_dashboard.core.config import settings
from billing_dashboard.deps import get_db, get_project
from billing_dashboard.models.customer import Customer
from billing_dashboard.models.gateway import PaymentGateway
from billing_dashboard.models.logs import AuditLog, WebhookLog
from billing_dashboard.models.project import Project
from billing_dashboard.models.snapshot import DailyRevenueSnapshot
from billing_dashboard.models.subscription import Subscription
from billing_dashboard.models.transaction import Transaction
from billing_dashboard.schemas.project import ProjectRead, GatewayRead
from billing_dashboard.schemas.report import SnapshotRead, AuditLogRead, WebhookLogRead
from billing_dashboard.schemas.transaction import CustomerRead, TransactionRead, SubscriptionRead

router = APIRouter(prefix="/projects", tags=["Projects"])

TransactionFilter = Literal["all", "succeeded", "pending", "failed", "refunded"]
SubscriptionFilter = Literal["all", "active", "past_due", "canceled", "expired"]


def _limit(default: int | None = None):
    # no default means the whole set; diagnostics and recent rows pass a default
    return Query(default, ge=1)


def _page(query, limit: Optional[int]):
    return query.limit(limit) if limit else query


@router.get("", response_model=list[ProjectRead])
def list_projects(db: Session = Depends(get_db)):
    return db.query(Project).order_by(Project.created_at.desc()).all()


@router.get("/{project_id}", response_model=ProjectRead)
def read_project(project: Project = Depends(get_project)):
    return project


# --- Transactions / subscriptions: newest first, optional status equality ---
@router.get("/{project_id}/transactions", response_model=list[TransactionRead])
def list_transactions(
    status: TransactionFilter = "all",
    limit: Optional[int] = _limit(),
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    query = db.query(Transaction).filter(Transaction.project_id == project.id)
    if status != "all":
        query = query.filter(Transaction.status == status)
    return _page(query.order_by(Transaction.created_at.desc()), limit).all()


@router.get("/{project_id}/transactions/recent", response_model=list[TransactionRead])
def recent_transactions(
    limit: int = _limit(settings.RECENT_TRANSACTIONS_LIMIT),
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    return (
        db.query(Transaction)
        .filter(Transaction.project_id == project.id)
        .order_by(Transaction.created_at.desc())
        .limit(limit)
        .all()
    )


@router.get("/{project_id}/subscriptions", response_model=list[SubscriptionRead])
def list_subscriptions(
    status: SubscriptionFilter = "all",
    limit: Optional[int] = _limit(),
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    query = db.query(Subscription).filter(Subscription.project_id == project.id)
    if status != "all":
        query = query.filter(Subscription.status == status)
    return _page(query.order_by(Subscription.created_at.desc()), limit).all()


@router.get("/{project_id}/customers", response_model=list[CustomerRead])
def list_customers(
    email: Optional[EmailStr] = None,
    limit: Optional[int] = _limit(),
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    query = db.query(Customer).filter(Customer.project_id == project.id)
    if email:
        query = query.filter(Customer.email == email)
    return _page(query.order_by(Customer.created_at.desc()), limit).all()


@router.get("/{project_id}/gateways", response_model=list[GatewayRead])
def list_gateways(project: Project = Depends(get_project), db: Session = Depends(get_db)):
    return (
        db.query(PaymentGateway)
        .filter(PaymentGateway.project_id == project.id)
        .order_by(PaymentGateway.gateway_name)
        .all()
    )


@router.get("/{project_id}/snapshots", response_model=list[SnapshotRead])
def list_snapshots(
    start: Optional[date] = None,
    end: Optional[date] = None,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    query = db.query(DailyRevenueSnapshot).filter(DailyRevenueSnapshot.project_id == project.id)
    if start:
        query = query.filter(DailyRevenueSnapshot.date >= start)
    if end:
        query = query.filter(DailyRevenueSnapshot.date <= end)
    return query.order_by(DailyRevenueSnapshot.date.asc()).all()


# --- Diagnostics (append-only logs) ---
@router.get("/{project_id}/audit-log", response_model=list[AuditLogRead])
def list_audit_log(
    entity_type: Optional[str] = None,
    limit: int = _limit(settings.LOG_PAGE_LIMIT),
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    query = db.query(AuditLog).filter(AuditLog.project_id == project.id)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    return query.order_by(AuditLog.created_at.desc()).limit(limit).all()


@router.get("/{project_id}/webhook-logs", response_model=list[WebhookLogRead])
def list_webhook_logs(
    status: Optional[str] = None,
    limit: int = _limit(settings.LOG_PAGE_LIMIT),
    project: Project = Depends(get_project),
    db: Session = Depends(get_db),
):
    query = db.query(WebhookLog).filter(WebhookLog.project_id == project.id)
    if status:
        query = query.filter(WebhookLog.status == status)
    return query.order_by(WebhookLog.created_at.desc()).limit(limit).all()
