# billing_dashboard/models/logs.py
import uuid
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Uuid, Index
from sqlalchemy.sql import func
from billing_dashboard.database import Base
from billing_dashboard.models.project import JSON_TYPE


class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    entity_type = Column(String(50))  # transaction | subscription | customer
    entity_id = Column(Uuid)
    action = Column(String(50))       # created | updated | deleted | refunded
    old_values = Column(JSON_TYPE)
    new_values = Column(JSON_TYPE)
    user_ip = Column(String(45))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_audit_project", "project_id"),
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_created", "created_at"),
    )


class WebhookLog(Base):
    __tablename__ = "webhook_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    gateway_name = Column(String(50))
    event_type = Column(String(100))
    payload = Column(JSON_TYPE)
    status = Column(String(50))  # received | processed | failed | retried
    error_message = Column(Text)
    retry_count = Column(Integer, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_webhook_logs_project", "project_id"),
        Index("idx_webhook_logs_gateway", "gateway_name"),
        Index("idx_webhook_logs_status", "status"),
        Index("idx_webhook_logs_created", "created_at"),
    )
