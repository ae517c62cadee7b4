from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional


class CustomerRef(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class CustomerRead(BaseModel):
    id: UUID
    project_id: UUID
    external_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    country: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionRead(BaseModel):
    id: UUID
    project_id: UUID
    customer_id: Optional[UUID] = None
    external_id: str
    gateway_name: str
    type: str
    status: str
    amount: int
    # DEFAULT without NOT NULL: rows from other writers can carry NULL here
    fee_amount: Optional[int] = None
    net_amount: Optional[int] = None
    currency: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    customer: Optional[CustomerRef] = None

    class Config:
        from_attributes = True


class SubscriptionRead(BaseModel):
    id: UUID
    project_id: UUID
    customer_id: UUID
    external_id: str
    plan_id: Optional[str] = None
    plan_name: Optional[str] = None
    amount: int
    currency: str
    status: str
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None
    canceled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    customer: Optional[CustomerRef] = None

    class Config:
        from_attributes = True
