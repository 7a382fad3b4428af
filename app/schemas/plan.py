from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class BillingInterval(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    TWO_YEARS = "2years"
    THREE_YEARS = "3years"


class PlanResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    currency: str
    interval: str
    is_active: bool
    display_order: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlanListResponse(BaseModel):
    items: list[PlanResponse]
    total_count: int
