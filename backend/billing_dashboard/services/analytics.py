"""
Server-side revenue aggregation.

Every figure the dashboard shows is computed here; the reporting client only
renders what these functions return. All time windows are explicit arguments
so results are reproducible for a given input.
"""
import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import and_, case, func, literal_column
from sqlalchemy.orm import Session

from billing_dashboard.models.customer import Customer
from billing_dashboard.models.project import Project
from billing_dashboard.models.subscription import Subscription, SubscriptionStatus
from billing_dashboard.models.transaction import Transaction, TransactionStatus, TransactionType

log = logging.getLogger(__name__)

SUCCEEDED = Transaction.status == TransactionStatus.SUCCEEDED.value
ACTIVE = Subscription.status == SubscriptionStatus.ACTIVE.value


def resolve_timezone(name: str) -> tzinfo:
    """UTC without touching the tz database, anything else through zoneinfo."""
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _month_start(db: Session, column):
    # literal arguments keep the SELECT and GROUP BY expressions textually identical
    if db.get_bind().dialect.name == "postgresql":
        return func.date_trunc(literal_column("'month'"), column)
    return func.strftime(literal_column("'%Y-%m-01'"), column)


# =========================
# SUMMARY CARDS
# =========================
def summary_stats(db: Session, project_id: UUID) -> dict:
    """
    Totals for one project:
    - revenue / fees: succeeded transactions only, net = revenue - fees
    - refunded_amount: succeeded refund transactions, reported apart from net
    - counts: all transactions, all customers, active subscriptions
    - mrr: sum of active subscription amounts
    """
    revenue, fees, refunded, tx_count = (
        db.query(
            func.coalesce(func.sum(case((SUCCEEDED, Transaction.amount), else_=0)), 0),
            func.coalesce(func.sum(case((SUCCEEDED, func.coalesce(Transaction.fee_amount, 0)), else_=0)), 0),
            func.coalesce(
                func.sum(case(
                    (and_(SUCCEEDED, Transaction.type == TransactionType.REFUND.value), Transaction.amount),
                    else_=0,
                )),
                0,
            ),
            func.count(Transaction.id),
        )
        .filter(Transaction.project_id == project_id)
        .one()
    )

    total_customers = (
        db.query(func.count(Customer.id))
        .filter(Customer.project_id == project_id)
        .scalar() or 0
    )

    active_count, mrr = (
        db.query(func.count(Subscription.id), func.coalesce(func.sum(Subscription.amount), 0))
        .filter(Subscription.project_id == project_id, ACTIVE)
        .one()
    )

    revenue, fees = int(revenue), int(fees)
    return {
        "total_revenue": revenue,
        "total_fees": fees,
        "net_revenue": revenue - fees,
        "refunded_amount": int(refunded),
        "total_transactions": int(tx_count),
        "total_customers": int(total_customers),
        "active_subscriptions": int(active_count),
        "mrr": int(mrr),
    }


# =========================
# TREND
# =========================
def revenue_trend(
    db: Session,
    project_id: UUID,
    end: datetime,
    window_days: int = 30,
    max_buckets: int = 14,
    tz: str = "UTC",
) -> list[dict]:
    """
    Succeeded revenue per calendar day (in `tz`) over [end - window_days, end].

    The series is sparse: a day shows up only if it has at least one
    transaction of any status, so failed-only days come back as zero buckets
    and empty days are missing. Only the latest `max_buckets` days are kept,
    oldest first.
    """
    zone = resolve_timezone(tz)
    end = as_utc(end)
    start = end - timedelta(days=window_days)

    rows = (
        db.query(Transaction.created_at, Transaction.amount, Transaction.status)
        .filter(Transaction.project_id == project_id)
        .filter(Transaction.created_at >= start)
        .filter(Transaction.created_at <= end)
        .order_by(Transaction.created_at.asc())
        .all()
    )

    buckets: dict[date, int] = {}
    for created_at, amount, status in rows:
        day = as_utc(created_at).astimezone(zone).date()
        buckets.setdefault(day, 0)
        if status == TransactionStatus.SUCCEEDED.value:
            buckets[day] += amount

    days = sorted(buckets)[-max_buckets:] if max_buckets > 0 else []
    log.debug("trend project=%s rows=%d buckets=%d", project_id, len(rows), len(days))
    return [{"date": d, "revenue": buckets[d]} for d in days]


# =========================
# REPORTS (same aggregates as the persisted views; customer_stats takes an
# explicit window and reports it as new_customers + window_start)
# =========================
def monthly_revenue(db: Session, project_id: UUID | None = None) -> list[dict]:
    month = _month_start(db, Transaction.created_at)
    query = (
        db.query(
            month,
            Project.id,
            Project.name,
            func.sum(case((SUCCEEDED, Transaction.amount), else_=0)),
            func.sum(case((SUCCEEDED, func.coalesce(Transaction.fee_amount, 0)), else_=0)),
            func.sum(case((SUCCEEDED, Transaction.amount - func.coalesce(Transaction.fee_amount, 0)), else_=0)),
            func.count(case(
                (and_(SUCCEEDED, Transaction.type == TransactionType.PAYMENT.value), Transaction.customer_id),
            ).distinct()),
        )
        .select_from(Transaction)
        .join(Project, Transaction.project_id == Project.id)
    )
    if project_id is not None:
        query = query.filter(Transaction.project_id == project_id)

    rows = (
        query.group_by(month, Project.id, Project.name)
        .order_by(month.desc(), Project.name)
        .all()
    )
    return [
        {
            "month": _as_date(m),
            "project_id": pid,
            "project_name": name,
            "total_revenue": int(revenue or 0),
            "total_fees": int(fees or 0),
            "net_revenue": int(net or 0),
            "paying_customers": int(paying or 0),
        }
        for m, pid, name, revenue, fees, net, paying in rows
    ]


def active_subscriptions(db: Session, project_id: UUID | None = None) -> list[dict]:
    query = (
        db.query(
            Project.id,
            Project.name,
            func.count(Subscription.id),
            func.coalesce(func.sum(Subscription.amount), 0),
            func.count(case((Subscription.cancel_at_period_end.is_(True), 1))),
        )
        .select_from(Subscription)
        .join(Project, Subscription.project_id == Project.id)
        .filter(ACTIVE)
    )
    if project_id is not None:
        query = query.filter(Subscription.project_id == project_id)

    rows = query.group_by(Project.id, Project.name).order_by(Project.name).all()
    return [
        {
            "project_id": pid,
            "project_name": name,
            "total_active": int(total),
            "mrr": int(mrr),
            "scheduled_cancellations": int(cancelling),
        }
        for pid, name, total, mrr, cancelling in rows
    ]


def customer_stats(
    db: Session,
    as_of: datetime,
    project_id: UUID | None = None,
    window_days: int = 30,
) -> list[dict]:
    """
    Per project: all customers, customers created in (as_of - window_days, as_of],
    and customers holding at least one active subscription.
    """
    as_of = as_utc(as_of)
    since = as_of - timedelta(days=window_days)
    is_new = and_(Customer.created_at > since, Customer.created_at <= as_of)
    query = (
        db.query(
            Project.id,
            Project.name,
            func.count(Customer.id.distinct()),
            func.count(case((is_new, Customer.id)).distinct()),
            func.count(Subscription.customer_id.distinct()),
        )
        .select_from(Customer)
        .outerjoin(Subscription, and_(Customer.id == Subscription.customer_id, ACTIVE))
        .join(Project, Customer.project_id == Project.id)
    )
    if project_id is not None:
        query = query.filter(Customer.project_id == project_id)

    rows = query.group_by(Project.id, Project.name).order_by(Project.name).all()
    return [
        {
            "project_id": pid,
            "project_name": name,
            "total_customers": int(total),
            "new_customers": int(new),
            "customers_with_subscriptions": int(subscribed),
            "window_start": since,
        }
        for pid, name, total, new, subscribed in rows
    ]
