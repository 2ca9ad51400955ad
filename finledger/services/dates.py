from datetime import date, datetime, timedelta

import pandas as pd

from finledger.models.enums import Periodicity
from finledger.models.schemas.common import DATE_PATTERN
from finledger.services.errors import LedgerValidationError


def today() -> date:
    return date.today()


def parse_iso_date(value, field: str) -> date:
    """Strict ``YYYY-MM-DD`` parsing for values crossing the API boundary."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise LedgerValidationError(f"{field} must be YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise LedgerValidationError(f"{field} must be YYYY-MM-DD")


def coerce_date(value) -> date | None:
    """Lenient parse truncated to midnight; None when missing or unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def days_between(start: date, end: date) -> int:
    return max(0, (end - start).days)


def add_months(d: date, months: int) -> date:
    # DateOffset clamps to the last day of shorter months
    return (pd.Timestamp(d) + pd.DateOffset(months=months)).date()


def shift_date(current, periodicity: Periodicity | str, n_days: int | None = None) -> date | None:
    d = coerce_date(current)
    if d is None:
        return None
    try:
        periodicity = Periodicity(periodicity)
    except ValueError:
        raise LedgerValidationError(f"Invalid periodicity: {periodicity}")

    if periodicity == Periodicity.monthly:
        return add_months(d, 1)
    if periodicity == Periodicity.quarterly:
        return add_months(d, 3)
    step = int(n_days or 0)
    return d + timedelta(days=max(1, step))


def month_range(month: str | None = None, reference: date | None = None) -> tuple[date, date]:
    """First day of ``month`` (YYYY-MM, default current) and first day of the next one."""
    ref = reference or today()
    start = date(ref.year, ref.month, 1)
    if month:
        parsed = pd.to_datetime(month, format="%Y-%m", errors="coerce")
        if pd.isna(parsed):
            raise LedgerValidationError("month must be YYYY-MM")
        start = parsed.date()
    return start, add_months(start, 1)
