"""Annuity and calendar arithmetic shared by the payment and debt views.

Every function here is pure and total: degenerate inputs (zero term, zero or
non-finite rate, overflowing powers) clamp to 0 or to the straight-line
fallback instead of raising or returning NaN/inf.
"""
import math
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from finledger.services.dates import coerce_date, today

CENT = Decimal("0.01")


def to_number(value, fallback: float = 0.0) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return fallback
    return n if math.isfinite(n) else fallback


def round_money(value) -> float | None:
    n = to_number(value, fallback=math.nan)
    if math.isnan(n):
        return None
    return float(Decimal(repr(n)).quantize(CENT, rounding=ROUND_HALF_UP))


def _monthly_rate(apy) -> float:
    return to_number(apy) / 12 / 100


def annuity_payment(principal, apy, term_months) -> float:
    P = to_number(principal)
    n = round(to_number(term_months))
    if n <= 0 or P <= 0:
        return 0.0
    r = _monthly_rate(apy)
    if r == 0:
        return P / n
    try:
        payment = P * r / (1 - (1 + r) ** -n)
    except (OverflowError, ZeroDivisionError):
        return 0.0
    if isinstance(payment, complex) or not math.isfinite(payment):
        return 0.0
    return payment


def annuity_balance(principal, apy, term_months, paid_months) -> float:
    P = to_number(principal)
    n = round(to_number(term_months))
    k = max(0, round(to_number(paid_months)))
    if n <= 0 or P <= 0:
        return 0.0
    if k >= n:
        return 0.0
    r = _monthly_rate(apy)
    if r == 0:
        return max(P - (P / n) * k, 0.0)
    A = annuity_payment(P, to_number(apy), n)
    try:
        growth = (1 + r) ** k
        balance = P * growth - A * ((growth - 1) / r)
    except (OverflowError, ZeroDivisionError):
        return 0.0
    if isinstance(balance, complex) or not math.isfinite(balance):
        return 0.0
    return max(balance, 0.0)


def months_between(start, reference=None) -> int:
    start_date = coerce_date(start)
    if start_date is None:
        return 0
    ref = coerce_date(reference) or today()
    total = (ref.year - start_date.year) * 12 + (ref.month - start_date.month)
    return max(total, 0)


def days_left(target, reference=None) -> int | None:
    target_date = coerce_date(target)
    if target_date is None:
        return None
    ref: date = coerce_date(reference) or today()
    return (target_date - ref).days
