from datetime import datetime

from dateutil.relativedelta import relativedelta

from app.exceptions import InvalidInterval
from app.schemas.plan import BillingInterval

# relativedelta clamps to the last valid day of the target month:
# Jan 31 + 1 month -> Feb 28/29, Feb 29 + 1 year -> Feb 28.
INTERVAL_DELTAS = {
    BillingInterval.MONTHLY: relativedelta(months=1),
    BillingInterval.QUARTERLY: relativedelta(months=3),
    BillingInterval.YEARLY: relativedelta(years=1),
    BillingInterval.TWO_YEARS: relativedelta(years=2),
    BillingInterval.THREE_YEARS: relativedelta(years=3),
}


def parse_interval(interval) -> BillingInterval:
    """Normalise a stored interval string, raising InvalidInterval if unknown."""
    if isinstance(interval, BillingInterval):
        return interval
    if not isinstance(interval, str):
        raise InvalidInterval(interval)
    try:
        return BillingInterval(interval.strip().lower())
    except ValueError:
        raise InvalidInterval(interval) from None


def compute_end_date(start_date: datetime, interval: str) -> datetime:
    """Return the exclusive end of a billing period starting at start_date."""
    return start_date + INTERVAL_DELTAS[parse_interval(interval)]
