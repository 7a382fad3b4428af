import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.order import Order, utc_now

logger = logging.getLogger(__name__)


def find_order_id(db: Session, user_id: int, order_number: str) -> Optional[int]:
    """Internal id of the caller's order with this number, if any."""
    try:
        order = (
            db.query(Order)
            .filter(
                Order.order_number == order_number,
                (Order.user_id == user_id) | Order.user_id.is_(None),
            )
            .first()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to look up order {order_number}: {e}")
        return None
    return order.id if order else None


def mark_order_completed(db: Session, user_id: int, order_number: str) -> bool:
    """Mark the caller's order as completed. Failures are logged, not raised."""
    try:
        order = (
            db.query(Order)
            .filter(
                Order.order_number == order_number,
                (Order.user_id == user_id) | Order.user_id.is_(None),
            )
            .first()
        )
        if order is None:
            logger.warning(f"Order {order_number} not found for user {user_id}")
            return False
        order.status = "completed"
        order.updated_at = utc_now()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update order {order_number}: {e}")
        return False

    logger.info(f"Order {order_number} marked completed")
    return True
