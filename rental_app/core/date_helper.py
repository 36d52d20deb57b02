import math
from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta

from core.settings import settings


def today() -> date:
    return datetime.now(timezone.utc).date()


def calculate_lease_end(start_date: date, years: int | None = None) -> date:
    return start_date + relativedelta(years=years or settings.LEASE_TERM_YEARS)


def days_until(end: date | datetime, now: datetime | None = None) -> int:
    """Whole days until ``end``, rounded up, negative once it has passed."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if isinstance(end, datetime):
        end_dt = end if end.tzinfo else end.replace(tzinfo=timezone.utc)
    else:
        end_dt = datetime(end.year, end.month, end.day, tzinfo=timezone.utc)
    return math.ceil((end_dt - now).total_seconds() / 86400)
