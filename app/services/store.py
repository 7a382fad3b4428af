"""Persistent subscription state.

The one-active-subscription-per-user rule is enforced by the
``uq_user_subscriptions_one_active`` partial unique index; the writes here
translate a violation of that index into ``AlreadyActive``.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import AlreadyActive, NotAuthorized, NotFound
from app.models.subscription import UserSubscription
from app.models.subscription_history import SubscriptionHistory
from app.models.subscription_transaction import SubscriptionTransaction

logger = logging.getLogger(__name__)


def get_active_subscription(db: Session, user_id: int) -> Optional[UserSubscription]:
    return (
        db.query(UserSubscription)
        .filter(
            UserSubscription.user_id == user_id,
            UserSubscription.status == "active",
        )
        .first()
    )


def get_owned_subscription(db: Session, user_id: int, subscription_id: int) -> UserSubscription:
    """Load a subscription and check it belongs to user_id."""
    subscription = (
        db.query(UserSubscription)
        .filter(UserSubscription.id == subscription_id)
        .first()
    )
    if subscription is None:
        raise NotFound(subscription_id)
    if subscription.user_id != user_id:
        logger.warning(
            f"User {user_id} attempted to access subscription {subscription_id} "
            f"owned by user {subscription.user_id}"
        )
        raise NotAuthorized(details={"subscription_id": subscription_id})
    return subscription


def _already_active_error(db: Session, user_id: int) -> Optional[AlreadyActive]:
    existing = get_active_subscription(db, user_id)
    if existing is None:
        return None
    plan_name = existing.plan.name if existing.plan is not None else None
    return AlreadyActive(end_date=existing.end_date, plan_name=plan_name)


def try_create_active_subscription(db: Session, subscription: UserSubscription) -> UserSubscription:
    """Insert an active subscription unless the user already holds one.

    The pre-check only produces a friendly error; the unique index decides
    when two requests race past it.
    """
    error = _already_active_error(db, subscription.user_id)
    if error is not None:
        raise error

    db.add(subscription)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        error = _already_active_error(db, subscription.user_id)
        if error is None:
            raise
        logger.info(
            f"Concurrent create rejected by active-subscription index for user {subscription.user_id}"
        )
        raise error
    db.refresh(subscription)
    return subscription


def save_subscription(db: Session, subscription: UserSubscription) -> UserSubscription:
    """Commit in-place changes to a subscription."""
    user_id = subscription.user_id
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        error = _already_active_error(db, user_id)
        if error is None:
            raise
        raise error
    db.refresh(subscription)
    return subscription


def list_history(db: Session, user_id: int) -> list[SubscriptionHistory]:
    return (
        db.query(SubscriptionHistory)
        .filter(SubscriptionHistory.user_id == user_id)
        .order_by(SubscriptionHistory.effective_date.desc(), SubscriptionHistory.id.desc())
        .all()
    )


def list_transactions(db: Session, user_id: int) -> list[SubscriptionTransaction]:
    return (
        db.query(SubscriptionTransaction)
        .join(UserSubscription, SubscriptionTransaction.subscription_id == UserSubscription.id)
        .filter(UserSubscription.user_id == user_id)
        .order_by(SubscriptionTransaction.created_at.desc(), SubscriptionTransaction.id.desc())
        .all()
    )
