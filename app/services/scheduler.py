import logging
from datetime import datetime, timezone
from typing import Optional

import pytz
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from app.config import settings
from app.db import SessionLocal
from app.models.subscription import UserSubscription

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()

LAPSING_STATUSES = ("active", "cancelled")


def expire_lapsed_subscriptions(db: Session, now: Optional[datetime] = None) -> int:
    """
    Move subscriptions whose paid period has ended to "expired".
    Covers both active subscriptions that were not renewed in time and
    cancelled ones whose remaining access has run out.
    Returns the number of subscriptions expired.
    """
    now = now or datetime.now(timezone.utc)

    lapsed = (
        db.query(UserSubscription)
        .filter(
            UserSubscription.status.in_(LAPSING_STATUSES),
            UserSubscription.end_date <= now,
        )
        .all()
    )

    for subscription in lapsed:
        logger.info(
            f"Expiring subscription {subscription.id} for user {subscription.user_id} "
            f"(was {subscription.status}, ended {subscription.end_date})"
        )
        subscription.status = "expired"
        subscription.auto_renew = False
        subscription.next_payment_date = None

    db.commit()
    return len(lapsed)


def process_expired_subscriptions():
    """Scheduled job: run the expiry sweep in its own session."""
    logger.info("Starting subscription expiry job")
    db: Session = SessionLocal()

    try:
        count = expire_lapsed_subscriptions(db)
        logger.info(f"Subscription expiry job completed, {count} expired")
    except Exception as e:
        logger.error(f"Error in subscription expiry job: {e}")
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler."""
    if not settings.enable_scheduler:
        logger.info("Scheduler is disabled via configuration")
        return

    if scheduler.running:
        logger.info("Scheduler is already running")
        return

    # Hourly expiry sweep
    trigger = CronTrigger(
        minute=settings.expiry_sweep_minute,
        timezone=pytz.UTC,
    )
    scheduler.add_job(
        process_expired_subscriptions,
        trigger=trigger,
        id="subscription_expiry",
        name="Hourly Subscription Expiry Sweep",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(
        f"Scheduler started. Expiry sweep scheduled at minute {settings.expiry_sweep_minute} of every hour"
    )


def stop_scheduler():
    """Stop the background scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


def run_expiry_job_now():
    """
    Manually trigger the expiry job (useful for testing).
    """
    logger.info("Manually triggering subscription expiry job")
    process_expired_subscriptions()
