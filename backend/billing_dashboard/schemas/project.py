from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional


class ProjectRead(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    currency: Optional[str] = None
    is_active: Optional[bool] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GatewayRead(BaseModel):
    # credentials and webhook_secret are never exposed
    id: UUID
    project_id: Optional[UUID] = None
    gateway_name: str
    gateway_type: str
    is_live: Optional[bool] = None
    webhook_verified: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
