"""Date manipulation utilities"""

from datetime import date

from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """
    Advance a date by whole calendar months.

    Days past the end of the target month clamp to its last day:
    Jan 31 + 1 month = Feb 28 (Feb 29 in leap years).
    """
    return from_date + relativedelta(months=months)
