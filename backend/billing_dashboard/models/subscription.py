# billing_dashboard/models/subscription.py
import enum
import uuid
from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey, Uuid,
    CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from billing_dashboard.database import Base
from billing_dashboard.models.project import JSON_TYPE
from billing_dashboard.models.customer import Customer


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    EXPIRED = "expired"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False)
    gateway_id = Column(Uuid, ForeignKey("payment_gateways.id"), nullable=False)

    external_id = Column(String(255), nullable=False)  # gateway subscription id
    plan_id = Column(String(255))
    plan_name = Column(String(255))
    amount = Column(Integer, nullable=False)  # recurring amount, minor units
    currency = Column(String(3), nullable=False)
    status = Column(String(50), nullable=False)  # SubscriptionStatus

    current_period_start = Column(DateTime(timezone=True))
    current_period_end = Column(DateTime(timezone=True))
    cancel_at_period_end = Column(Boolean, default=False)
    canceled_at = Column(DateTime(timezone=True))

    metadata_ = Column("metadata", JSON_TYPE, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship(Customer, lazy="joined")

    __table_args__ = (
        UniqueConstraint("project_id", "external_id"),
        CheckConstraint("amount > 0", name="amount_check"),
        Index("idx_subscriptions_project", "project_id"),
        Index("idx_subscriptions_customer", "customer_id"),
        Index("idx_subscriptions_status", "status"),
        Index("idx_subscriptions_created", "created_at"),
    )

    @validates("amount")
    def validate_amount(self, key, value):
        if value is not None and (not isinstance(value, int) or value <= 0):
            raise ValueError(f"amount must be a positive integer, got {value!r}")
        return value
