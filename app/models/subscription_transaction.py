from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String

from app.db import Base


def utc_now():
    return datetime.now(timezone.utc)


class SubscriptionTransaction(Base):
    """Append-only record of every money-moving event on a subscription."""

    __tablename__ = "subscription_transactions"

    id = Column(Integer, primary_key=True, index=True)
    subscription_id = Column(Integer, ForeignKey("user_subscriptions.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    transaction_type = Column(String(20), nullable=False)  # payment, refund
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    payment_method = Column(String(100), nullable=False, default="unknown")
    status = Column(String(20), nullable=False)  # pending, completed, failed
    created_at = Column(DateTime, default=utc_now)
