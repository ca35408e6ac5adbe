"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from billboard_billing.domain.exceptions import InvalidAllocation

DateLike = Union[date, datetime, str, None]


def parse_date(value: DateLike) -> Optional[date]:
    """Coerce an ISO string, datetime or date into a calendar date (None/blank stays None)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidAllocation(f"Not a date: {value!r}")
    value = value.strip()
    if not value:
        return None
    try:
        return isoparse(value).date()
    except ValueError:
        raise InvalidAllocation(f"Invalid ISO date: {value!r}")


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last valid day (Jan 31 + 1 month -> Feb 28/29)"""
    try:
        return from_date + relativedelta(months=months)
    except (ValueError, OverflowError):
        raise InvalidAllocation(f"{from_date.isoformat()} plus {months} months is outside the supported calendar")
