"""
Date and time utilities for the occupancy service.

All timestamps are stored as naive UTC datetimes.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser
from dateutil.relativedelta import relativedelta


class DateTimeHelper:
    """Date and time manipulation utilities"""

    @staticmethod
    def utc_now() -> datetime:
        """Current UTC time without tzinfo, matching stored columns"""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def to_naive_utc(value: Optional[Union[datetime, date]]) -> Optional[datetime]:
        """Normalize a date/datetime to a naive UTC datetime"""
        if value is None:
            return None
        if not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day)
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @staticmethod
    def add_months(value: datetime, months: int) -> datetime:
        """Add calendar months, clamping to the last day of the target month"""
        return value + relativedelta(months=months)

    @staticmethod
    def parse_month(month: str) -> date:
        """Parse a billing month in YYYY-MM form"""
        parsed = parser.isoparse(f"{month}-01")
        return parsed.date()


def utc_now() -> datetime:
    """Current naive UTC time; shorthand for DateTimeHelper.utc_now"""
    return DateTimeHelper.utc_now()
