# billing_dashboard/models/project.py
import re
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, Uuid, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
from billing_dashboard.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSON_TYPE = JSON().with_variant(JSONB(), "postgresql")

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    currency = Column(String(3), default="USD")  # ISO-4217
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    config = Column(JSON_TYPE, default=dict)  # project-specific settings

    __table_args__ = (
        CheckConstraint("currency ~ '^[A-Z]{3}$'", name="currency_check").ddl_if(dialect="postgresql"),
        Index("idx_projects_active", "is_active"),
        Index("idx_projects_created", "created_at"),
    )

    @validates("currency")
    def validate_currency(self, key, value):
        if value is not None and not CURRENCY_RE.match(value):
            raise ValueError(f"Invalid currency code: {value!r}")
        return value
