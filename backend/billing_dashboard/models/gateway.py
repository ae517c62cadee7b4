# billing_dashboard/models/gateway.py
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.sql import func
from billing_dashboard.database import Base
from billing_dashboard.models.project import JSON_TYPE

SUPPORTED_GATEWAYS = ("stripe", "paypal", "paystack", "flutterwave")


class PaymentGateway(Base):
    __tablename__ = "payment_gateways"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"))

    gateway_name = Column(String(50), nullable=False)  # stripe | paypal | paystack | flutterwave
    gateway_type = Column(String(20), nullable=False)  # subscription | one_time | invoice
    live_credentials = Column(JSON_TYPE, nullable=False)  # encrypted by the writer
    test_credentials = Column(JSON_TYPE)
    is_live = Column(Boolean, default=False)
    webhook_secret = Column(String(255))
    webhook_verified = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("project_id", "gateway_name"),
        CheckConstraint(
            "gateway_name IN ('stripe', 'paypal', 'paystack', 'flutterwave')",
            name="valid_gateway",
        ),
        Index("idx_gateways_project", "project_id"),
        Index("idx_gateways_live", "is_live"),
    )
