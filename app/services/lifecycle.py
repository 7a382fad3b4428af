"""Subscription lifecycle: create, cancel, renew, change plan, toggle auto-renew.

Each operation validates against the stored state, commits the new
subscription state, then appends audit entries on a best-effort basis.
Storage exceptions are translated to ``InternalError`` here so callers only
ever see the typed errors from ``app.exceptions``.
"""

import functools
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import InternalError, NotActive, PlanNotFound, SubscriptionError
from app.models.subscription import UserSubscription, utc_now
from app.schemas.subscription import ChangeType, OrderDetails, SubscriptionStatus
from app.services import audit, orders, plans, store
from app.services.periods import compute_end_date

logger = logging.getLogger(__name__)


def _storage_boundary(failure_code: str = "SERVER_ERROR", retryable: bool = True):
    """Convert unexpected storage errors raised by an operation into InternalError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(db: Session, *args, **kwargs):
            try:
                return func(db, *args, **kwargs)
            except SubscriptionError:
                raise
            except SQLAlchemyError as e:
                db.rollback()
                logger.exception(f"Storage failure in {func.__name__}")
                if isinstance(e, OperationalError):
                    message = "Subscription store is unavailable, please retry"
                else:
                    message = f"Failed to {func.__name__.replace('_', ' ')}"
                raise InternalError(message, code=failure_code, retryable=retryable) from e

        return wrapper

    return decorator


def _require_active(subscription: UserSubscription) -> None:
    if subscription.status != SubscriptionStatus.ACTIVE.value:
        raise NotActive(subscription.status)


def classify_plan_change(current_price: Decimal, new_price: Decimal) -> ChangeType:
    """Upgrade only when the new plan costs strictly more; equal price is a downgrade."""
    if Decimal(new_price) > Decimal(current_price):
        return ChangeType.UPGRADE
    return ChangeType.DOWNGRADE


@_storage_boundary(failure_code="SUBSCRIPTION_CREATION_FAILED", retryable=False)
def create_subscription(
    db: Session,
    user_id: int,
    plan_id: int,
    payment_method: Optional[str] = None,
    order_details: Optional[OrderDetails] = None,
    now: Optional[datetime] = None,
) -> tuple[UserSubscription, Decimal]:
    """Start a new active subscription for user_id.

    Returns the stored subscription and the amount charged, which is the
    order total when the checkout supplied one and the plan price otherwise.
    """
    plan = plans.get_plan(db, plan_id, active_only=True)

    start_date = now or utc_now()
    end_date = compute_end_date(start_date, plan.interval)
    payment_method = payment_method or settings.default_payment_method

    subscription = UserSubscription(
        user_id=user_id,
        plan_id=plan.id,
        status=SubscriptionStatus.ACTIVE.value,
        start_date=start_date,
        end_date=end_date,
        auto_renew=True,
        payment_method=payment_method,
        last_payment_date=start_date,
        next_payment_date=end_date,
    )
    subscription = store.try_create_active_subscription(db, subscription)
    logger.info(
        f"Created subscription {subscription.id} for user {user_id} on plan {plan.id} "
        f"({plan.interval}) until {end_date.isoformat()}"
    )

    currency = plan.currency or settings.default_currency
    amount = order_details.total if order_details and order_details.total else plan.price

    audit.record_history(
        db,
        user_id=user_id,
        subscription_id=subscription.id,
        new_plan_id=plan.id,
        change_type=ChangeType.NEW.value,
        amount=plan.price,
        currency=currency,
        effective_date=start_date,
    )

    order_id = None
    order_number = order_details.order_number if order_details else None
    if order_number:
        orders.mark_order_completed(db, user_id, order_number)
        order_id = orders.find_order_id(db, user_id, order_number)

    audit.record_transaction(
        db,
        subscription_id=subscription.id,
        order_id=order_id,
        amount=amount,
        currency=currency,
        payment_method=payment_method,
    )

    db.refresh(subscription)
    return subscription, Decimal(amount)


@_storage_boundary()
def cancel_subscription(
    db: Session,
    user_id: int,
    subscription_id: int,
    now: Optional[datetime] = None,
) -> UserSubscription:
    """Stop future renewals. Access continues until the paid period ends."""
    subscription = store.get_owned_subscription(db, user_id, subscription_id)
    _require_active(subscription)

    effective_date = now or utc_now()
    plan = subscription.plan
    subscription.status = SubscriptionStatus.CANCELLED.value
    subscription.auto_renew = False
    subscription = store.save_subscription(db, subscription)
    logger.info(f"Cancelled subscription {subscription.id} for user {user_id}")

    audit.record_history(
        db,
        user_id=user_id,
        subscription_id=subscription.id,
        previous_plan_id=subscription.plan_id,
        change_type=ChangeType.CANCEL.value,
        amount=Decimal("0"),
        currency=plan.currency if plan is not None else settings.default_currency,
        effective_date=effective_date,
    )

    db.refresh(subscription)
    return subscription


@_storage_boundary()
def renew_subscription(
    db: Session,
    user_id: int,
    subscription_id: int,
    now: Optional[datetime] = None,
) -> UserSubscription:
    """Start a fresh billing period on the subscription's current plan.

    No status precondition: a cancelled or expired subscription is
    reactivated, subject to the one-active-subscription rule.
    """
    subscription = store.get_owned_subscription(db, user_id, subscription_id)
    plan = subscription.plan
    if plan is None:
        raise PlanNotFound(subscription.plan_id)

    start_date = now or utc_now()
    end_date = compute_end_date(start_date, plan.interval)

    subscription.status = SubscriptionStatus.ACTIVE.value
    subscription.start_date = start_date
    subscription.end_date = end_date
    subscription.auto_renew = True
    subscription.last_payment_date = start_date
    subscription.next_payment_date = end_date
    subscription = store.save_subscription(db, subscription)
    logger.info(
        f"Renewed subscription {subscription.id} for user {user_id} until {end_date.isoformat()}"
    )

    audit.record_history(
        db,
        user_id=user_id,
        subscription_id=subscription.id,
        new_plan_id=plan.id,
        change_type=ChangeType.RENEW.value,
        amount=plan.price,
        currency=plan.currency,
        effective_date=start_date,
    )
    audit.record_transaction(
        db,
        subscription_id=subscription.id,
        amount=plan.price,
        currency=plan.currency,
        payment_method=subscription.payment_method or settings.default_payment_method,
    )

    db.refresh(subscription)
    return subscription


@_storage_boundary()
def change_plan(
    db: Session,
    user_id: int,
    subscription_id: int,
    new_plan_id: int,
    now: Optional[datetime] = None,
) -> UserSubscription:
    """Move an active subscription to another plan, starting a new period."""
    subscription = store.get_owned_subscription(db, user_id, subscription_id)
    _require_active(subscription)

    current_plan = subscription.plan
    new_plan = plans.get_plan(db, new_plan_id)

    start_date = now or utc_now()
    end_date = compute_end_date(start_date, new_plan.interval)
    current_price = current_plan.price if current_plan is not None else Decimal("0")
    change_type = classify_plan_change(current_price, new_plan.price)
    previous_plan_id = subscription.plan_id

    subscription.plan_id = new_plan.id
    subscription.plan = new_plan
    subscription.start_date = start_date
    subscription.end_date = end_date
    subscription.last_payment_date = start_date
    subscription.next_payment_date = end_date
    subscription = store.save_subscription(db, subscription)
    logger.info(
        f"Changed subscription {subscription.id} from plan {previous_plan_id} "
        f"to {new_plan.id} ({change_type.value})"
    )

    audit.record_history(
        db,
        user_id=user_id,
        subscription_id=subscription.id,
        previous_plan_id=previous_plan_id,
        new_plan_id=new_plan.id,
        change_type=change_type.value,
        amount=new_plan.price,
        currency=new_plan.currency,
        effective_date=start_date,
    )
    audit.record_transaction(
        db,
        subscription_id=subscription.id,
        amount=new_plan.price,
        currency=new_plan.currency,
        payment_method=subscription.payment_method or settings.default_payment_method,
    )

    db.refresh(subscription)
    return subscription


@_storage_boundary()
def toggle_auto_renew(db: Session, user_id: int, subscription_id: int) -> tuple[UserSubscription, bool]:
    subscription = store.get_owned_subscription(db, user_id, subscription_id)
    _require_active(subscription)

    subscription.auto_renew = not subscription.auto_renew
    subscription = store.save_subscription(db, subscription)
    logger.info(f"Set auto_renew={subscription.auto_renew} on subscription {subscription.id}")
    return subscription, subscription.auto_renew


@_storage_boundary()
def get_current_subscription(db: Session, user_id: int) -> Optional[UserSubscription]:
    return store.get_active_subscription(db, user_id)


@_storage_boundary()
def get_history(db: Session, user_id: int):
    return store.list_history(db, user_id)


@_storage_boundary()
def get_transactions(db: Session, user_id: int):
    return store.list_transactions(db, user_id)
