from app.schemas.plan import BillingInterval, PlanListResponse, PlanResponse
from app.schemas.subscription import (
    CancelRequest,
    ChangePlanRequest,
    ChangeType,
    CreateSubscriptionRequest,
    CreateSubscriptionResult,
    ErrorResult,
    OrderDetails,
    RenewRequest,
    SubscriptionResponse,
    SubscriptionResult,
    SubscriptionStatus,
    ToggleAutoRenewRequest,
    ToggleAutoRenewResult,
    TransactionStatus,
    TransactionType,
)

__all__ = [
    "BillingInterval",
    "CancelRequest",
    "ChangePlanRequest",
    "ChangeType",
    "CreateSubscriptionRequest",
    "CreateSubscriptionResult",
    "ErrorResult",
    "OrderDetails",
    "PlanListResponse",
    "PlanResponse",
    "RenewRequest",
    "SubscriptionResponse",
    "SubscriptionResult",
    "SubscriptionStatus",
    "ToggleAutoRenewRequest",
    "ToggleAutoRenewResult",
    "TransactionStatus",
    "TransactionType",
]
