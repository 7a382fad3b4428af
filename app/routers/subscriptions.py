from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.subscription import (
    CurrentSubscriptionResponse,
    HistoryEntryResponse,
    HistoryListResponse,
    SubscriptionResponse,
    TransactionEntryResponse,
    TransactionListResponse,
)
from app.services import lifecycle

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.get("/current", response_model=CurrentSubscriptionResponse)
async def get_current_subscription(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the authenticated user's active subscription, if any."""
    subscription = lifecycle.get_current_subscription(db, current_user.id)
    if subscription is None:
        return CurrentSubscriptionResponse(subscription=None)
    return CurrentSubscriptionResponse(subscription=SubscriptionResponse.model_validate(subscription))


@router.get("/history", response_model=HistoryListResponse)
async def get_subscription_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List plan changes for the authenticated user, most recent first."""
    entries = lifecycle.get_history(db, current_user.id)
    return HistoryListResponse(
        items=[HistoryEntryResponse.model_validate(e) for e in entries],
        total_count=len(entries),
    )


@router.get("/transactions", response_model=TransactionListResponse)
async def get_subscription_transactions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List payments recorded against the authenticated user's subscriptions."""
    entries = lifecycle.get_transactions(db, current_user.id)
    return TransactionListResponse(
        items=[TransactionEntryResponse.model_validate(e) for e in entries],
        total_count=len(entries),
    )
