from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.subscription import (
    CancelRequest,
    ChangePlanRequest,
    CreateSubscriptionRequest,
    CreateSubscriptionResult,
    ErrorResult,
    RenewRequest,
    SubscriptionResponse,
    SubscriptionResult,
    ToggleAutoRenewRequest,
    ToggleAutoRenewResult,
)
from app.services import lifecycle

router = APIRouter(
    prefix="/subscription-service",
    tags=["subscription-service"],
    responses={
        403: {"model": ErrorResult},
        404: {"model": ErrorResult},
        409: {"model": ErrorResult},
        500: {"model": ErrorResult},
    },
)


@router.post("/create", response_model=CreateSubscriptionResult)
async def create(
    request: CreateSubscriptionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Start a subscription for the authenticated user after a successful checkout."""
    subscription, amount = lifecycle.create_subscription(
        db,
        current_user.id,
        plan_id=request.plan_id,
        payment_method=request.payment_method,
        order_details=request.order_details,
    )
    return CreateSubscriptionResult(
        subscription=SubscriptionResponse.model_validate(subscription),
        amount=amount,
    )


@router.post("/cancel", response_model=SubscriptionResult)
async def cancel(
    request: CancelRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cancel future renewals. Access continues until the current period ends."""
    subscription = lifecycle.cancel_subscription(db, current_user.id, request.subscription_id)
    return SubscriptionResult(subscription=SubscriptionResponse.model_validate(subscription))


@router.post("/renew", response_model=SubscriptionResult)
async def renew(
    request: RenewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Start a new billing period on the subscription's plan."""
    subscription = lifecycle.renew_subscription(db, current_user.id, request.subscription_id)
    return SubscriptionResult(subscription=SubscriptionResponse.model_validate(subscription))


@router.post("/change-plan", response_model=SubscriptionResult)
async def change_plan(
    request: ChangePlanRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Switch an active subscription to another plan."""
    subscription = lifecycle.change_plan(
        db, current_user.id, request.subscription_id, request.new_plan_id
    )
    return SubscriptionResult(subscription=SubscriptionResponse.model_validate(subscription))


@router.post("/toggle-auto-renew", response_model=ToggleAutoRenewResult)
async def toggle_auto_renew(
    request: ToggleAutoRenewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Flip auto-renew on an active subscription."""
    subscription, auto_renew = lifecycle.toggle_auto_renew(
        db, current_user.id, request.subscription_id
    )
    return ToggleAutoRenewResult(
        subscription=SubscriptionResponse.model_validate(subscription),
        auto_renew=auto_renew,
    )
