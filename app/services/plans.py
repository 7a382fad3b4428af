from sqlalchemy.orm import Session

from app.exceptions import PlanNotFound
from app.models.plan import SubscriptionPlan


def get_plan(db: Session, plan_id: int, active_only: bool = False) -> SubscriptionPlan:
    """Look up a plan by id, raising PlanNotFound if it is missing (or inactive when active_only)."""
    query = db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id)
    if active_only:
        query = query.filter(SubscriptionPlan.is_active.is_(True))
    plan = query.first()
    if plan is None:
        raise PlanNotFound(plan_id)
    return plan


def list_active_plans(db: Session) -> list[SubscriptionPlan]:
    return (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.is_active.is_(True))
        .order_by(SubscriptionPlan.display_order.asc(), SubscriptionPlan.id.asc())
        .all()
    )
