from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.plan import PlanListResponse, PlanResponse
from app.services import plans

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("", response_model=PlanListResponse)
async def list_plans(db: Session = Depends(get_db)):
    """List plans currently on sale, in display order."""
    items = plans.list_active_plans(db)
    return PlanListResponse(
        items=[PlanResponse.model_validate(p) for p in items],
        total_count=len(items),
    )


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(plan_id: int, db: Session = Depends(get_db)):
    """Get a single plan by ID."""
    return plans.get_plan(db, plan_id)
