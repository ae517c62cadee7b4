# billing_dashboard/models/customer.py
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.sql import func
from billing_dashboard.database import Base
from billing_dashboard.models.project import JSON_TYPE


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    external_id = Column(String(255))  # gateway customer id, e.g. cus_xxx
    email = Column(String(255))
    name = Column(String(255))
    country = Column(String(2))
    phone = Column(String(20))
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON_TYPE, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("project_id", "external_id"),
        CheckConstraint(
            "email ~* '^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\\.[A-Z|a-z]{2,}$'",
            name="email_format",
        ).ddl_if(dialect="postgresql"),
        Index("idx_customers_project", "project_id"),
        Index("idx_customers_email", "email"),
        Index("idx_customers_created", "created_at"),
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown"
