# billing_dashboard/models/transaction.py
import enum
import uuid
from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, Uuid, Computed,
    CheckConstraint, UniqueConstraint, Index, text,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from billing_dashboard.database import Base
from billing_dashboard.models.project import JSON_TYPE
from billing_dashboard.models.customer import Customer


class TransactionType(str, enum.Enum):
    PAYMENT = "payment"
    REFUND = "refund"
    SUBSCRIPTION_CREATION = "subscription_creation"
    SUBSCRIPTION_RENEWAL = "subscription_renewal"


class TransactionStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"
    REFUNDED = "refunded"


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=True)
    gateway_id = Column(Uuid, ForeignKey("payment_gateways.id"), nullable=False)

    external_id = Column(String(255), nullable=False)  # gateway transaction id
    gateway_name = Column(String(50), nullable=False)
    type = Column(String(50), nullable=False)    # TransactionType
    status = Column(String(50), nullable=False)  # TransactionStatus

    # minor currency units (cents)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    fee_amount = Column(Integer, default=0, server_default=text("0"))
    net_amount = Column(Integer, Computed("amount - fee_amount", persisted=True))

    description = Column(Text)
    metadata_ = Column("metadata", JSON_TYPE, default=dict)  # raw gateway response

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship(Customer, lazy="joined")

    __table_args__ = (
        UniqueConstraint("project_id", "external_id"),
        CheckConstraint("amount >= 0", name="amount_check"),
        CheckConstraint("fee_amount >= 0", name="fee_check"),
        Index("idx_transactions_project", "project_id"),
        Index("idx_transactions_customer", "customer_id"),
        Index("idx_transactions_gateway", "gateway_id"),
        Index("idx_transactions_status", "status"),
        Index("idx_transactions_created", "created_at"),
        Index("idx_transactions_project_created", "project_id", "created_at"),
        Index("idx_transactions_type", "type"),
    )

    @validates("amount", "fee_amount")
    def validate_minor_units(self, key, value):
        if value is not None and (not isinstance(value, int) or value < 0):
            raise ValueError(f"{key} must be a non-negative integer, got {value!r}")
        return value
