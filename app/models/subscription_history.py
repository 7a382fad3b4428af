from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String

from app.db import Base


def utc_now():
    return datetime.now(timezone.utc)


class SubscriptionHistory(Base):
    """Append-only record of every lifecycle transition."""

    __tablename__ = "subscription_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    subscription_id = Column(Integer, ForeignKey("user_subscriptions.id"), nullable=False, index=True)
    previous_plan_id = Column(Integer, ForeignKey("subscription_plans.id"), nullable=True)
    new_plan_id = Column(Integer, ForeignKey("subscription_plans.id"), nullable=True)
    change_type = Column(String(20), nullable=False)  # new, upgrade, downgrade, cancel, renew
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False)
    effective_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime, default=utc_now)
