from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.plan import PlanResponse


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    TRIAL = "trial"


class ChangeType(str, Enum):
    NEW = "new"
    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"
    CANCEL = "cancel"
    RENEW = "renew"


class TransactionType(str, Enum):
    PAYMENT = "payment"
    REFUND = "refund"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# Request bodies
class OrderDetails(BaseModel):
    """Result of the upstream checkout, forwarded as-is by the purchase flow."""

    order_number: Optional[str] = Field(None, alias="orderNumber", max_length=64)
    total: Optional[Decimal] = Field(None, ge=0)

    class Config:
        populate_by_name = True


class CreateSubscriptionRequest(BaseModel):
    plan_id: int
    payment_method: Optional[str] = Field(None, max_length=100)
    order_details: Optional[OrderDetails] = None


class CancelRequest(BaseModel):
    subscription_id: int


class RenewRequest(BaseModel):
    subscription_id: int


class ChangePlanRequest(BaseModel):
    subscription_id: int
    new_plan_id: int


class ToggleAutoRenewRequest(BaseModel):
    subscription_id: int


# Responses
class SubscriptionResponse(BaseModel):
    id: int
    user_id: int
    plan_id: int
    status: str
    start_date: datetime
    end_date: datetime
    auto_renew: bool
    payment_method: str
    last_payment_date: Optional[datetime] = None
    next_payment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    plan: Optional[PlanResponse] = None

    class Config:
        from_attributes = True


class SubscriptionResult(BaseModel):
    status: Literal["success"] = "success"
    subscription: SubscriptionResponse


class CreateSubscriptionResult(SubscriptionResult):
    amount: Decimal


class ToggleAutoRenewResult(SubscriptionResult):
    auto_renew: bool


class ErrorResult(BaseModel):
    """Failure variant of every lifecycle result."""

    status: Literal["error"] = "error"
    code: str
    error: str
    details: dict[str, Any] = {}


class CurrentSubscriptionResponse(BaseModel):
    subscription: Optional[SubscriptionResponse] = None


class HistoryEntryResponse(BaseModel):
    id: int
    subscription_id: int
    previous_plan_id: Optional[int] = None
    new_plan_id: Optional[int] = None
    change_type: str
    amount: Decimal
    currency: str
    effective_date: datetime

    class Config:
        from_attributes = True


class HistoryListResponse(BaseModel):
    items: list[HistoryEntryResponse]
    total_count: int


class TransactionEntryResponse(BaseModel):
    id: int
    subscription_id: int
    order_id: Optional[int] = None
    transaction_type: str
    amount: Decimal
    currency: str
    payment_method: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    items: list[TransactionEntryResponse]
    total_count: int
