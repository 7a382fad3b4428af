from app.models.order import Order
from app.models.plan import SubscriptionPlan
from app.models.subscription import UserSubscription
from app.models.subscription_history import SubscriptionHistory
from app.models.subscription_transaction import SubscriptionTransaction
from app.models.user import User

__all__ = [
    "Order",
    "SubscriptionHistory",
    "SubscriptionPlan",
    "SubscriptionTransaction",
    "User",
    "UserSubscription",
]
