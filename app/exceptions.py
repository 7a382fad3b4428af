"""Typed errors raised by the subscription lifecycle.

Every error carries a machine-readable ``code`` and the HTTP status it maps to.
Storage-layer exceptions never leave the service layer; they are converted to
``InternalError`` first.
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import status


class SubscriptionError(Exception):
    code = "SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Subscription request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)


class AlreadyActive(SubscriptionError):
    code = "SUBSCRIPTION_EXISTS"
    status_code = status.HTTP_409_CONFLICT
    message = "User already has an active subscription"

    def __init__(self, end_date: Optional[datetime] = None, plan_name: Optional[str] = None):
        self.end_date = end_date
        self.plan_name = plan_name
        super().__init__(
            details={
                "end_date": end_date.isoformat() if end_date else None,
                "plan_name": plan_name,
            }
        )


class PlanNotFound(SubscriptionError):
    code = "PLAN_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Plan not found"

    def __init__(self, plan_id: Any = None):
        self.plan_id = plan_id
        super().__init__(details={"plan_id": plan_id})


class NotFound(SubscriptionError):
    code = "SUBSCRIPTION_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Subscription not found"

    def __init__(self, subscription_id: Any = None):
        self.subscription_id = subscription_id
        super().__init__(details={"subscription_id": subscription_id})


class NotAuthorized(SubscriptionError):
    code = "NOT_AUTHORIZED"
    status_code = status.HTTP_403_FORBIDDEN
    message = "Subscription does not belong to the current user"


class NotActive(SubscriptionError):
    code = "SUBSCRIPTION_NOT_ACTIVE"
    status_code = status.HTTP_409_CONFLICT
    message = "Subscription is not active"

    def __init__(self, current_status: Optional[str] = None):
        self.current_status = current_status
        super().__init__(details={"status": current_status})


class InvalidInterval(SubscriptionError):
    code = "INVALID_INTERVAL"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Invalid subscription interval"

    def __init__(self, interval: Any = None):
        self.interval = interval
        super().__init__(
            message=f"Invalid subscription interval: {interval}",
            details={"interval": interval},
        )


class InternalError(SubscriptionError):
    code = "SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, retryable: bool = True):
        if code:
            self.code = code
        self.retryable = retryable
        super().__init__(message=message, details={"retryable": retryable})
