"""Best-effort audit trail.

Entries are written in their own commit after the subscription state has
been committed. A failed write is logged and dropped; it never fails or
reverts the lifecycle operation that produced it.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.subscription_history import SubscriptionHistory
from app.models.subscription_transaction import SubscriptionTransaction
from app.schemas.subscription import TransactionStatus, TransactionType

logger = logging.getLogger(__name__)


def _persist(db: Session, entry) -> None:
    db.add(entry)
    db.commit()


def record_history(
    db: Session,
    user_id: int,
    subscription_id: int,
    change_type: str,
    amount: Decimal,
    currency: str,
    effective_date: datetime,
    previous_plan_id: Optional[int] = None,
    new_plan_id: Optional[int] = None,
) -> Optional[SubscriptionHistory]:
    entry = SubscriptionHistory(
        user_id=user_id,
        subscription_id=subscription_id,
        previous_plan_id=previous_plan_id,
        new_plan_id=new_plan_id,
        change_type=change_type,
        amount=amount,
        currency=currency,
        effective_date=effective_date,
    )
    try:
        _persist(db, entry)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Failed to record {change_type} history for subscription {subscription_id}: {e}"
        )
        return None
    return entry


def record_transaction(
    db: Session,
    subscription_id: int,
    amount: Decimal,
    currency: str,
    payment_method: str,
    transaction_type: str = TransactionType.PAYMENT.value,
    status: str = TransactionStatus.COMPLETED.value,
    order_id: Optional[int] = None,
) -> Optional[SubscriptionTransaction]:
    entry = SubscriptionTransaction(
        subscription_id=subscription_id,
        order_id=order_id,
        transaction_type=transaction_type,
        amount=amount,
        currency=currency,
        payment_method=payment_method,
        status=status,
    )
    try:
        _persist(db, entry)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Failed to record {transaction_type} transaction for subscription {subscription_id}: {e}"
        )
        return None
    return entry
