from collections import defaultdict
from typing import Iterable

from finledger.models.enums import ForecastPeriod
from finledger.models.schemas.income import ForecastItem, Income, IncomeForecast
from finledger.services.dates import add_months, coerce_date, shift_date, today
from finledger.services.finance import round_money, to_number


def _advance(cursor, income: Income):
    nxt = shift_date(cursor, income.periodicity, income.n_days)
    # Stop on anything that would not move forward
    if nxt is None or nxt <= cursor:
        return None
    return nxt


def build_income_forecast(
    incomes: Iterable[Income],
    period: ForecastPeriod | str = ForecastPeriod.month,
    *,
    reference=None,
    base_currency: str | None = None,
) -> IncomeForecast:
    """
    Project active incomes up to one month (or one year) ahead.

    Stored ``next_date`` values are never modified; past dates are walked
    forward on a local cursor. ``month`` buckets by day, ``year`` by calendar
    month.
    """
    period = ForecastPeriod(period)
    start = coerce_date(reference) or today()
    horizon = add_months(start, 12 if period == ForecastPeriod.year else 1)

    buckets: dict[str, float] = defaultdict(float)
    for income in incomes:
        if not income.is_active or income.next_date is None:
            continue
        if base_currency and income.currency and income.currency.upper() != base_currency.upper():
            continue

        cursor = coerce_date(income.next_date)
        while cursor is not None and cursor < start:
            cursor = _advance(cursor, income)

        while cursor is not None and cursor <= horizon:
            key = cursor.strftime("%Y-%m") if period == ForecastPeriod.year else cursor.isoformat()
            buckets[key] += to_number(income.amount)
            cursor = _advance(cursor, income)

    items = [ForecastItem(date=key, amount=round_money(buckets[key])) for key in sorted(buckets)]
    total = round_money(sum(item.amount for item in items))
    return IncomeForecast(period=period, total=total, items=items)
