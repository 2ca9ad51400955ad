from datetime import date

from finledger.models.enums import PaymentType
from finledger.models.schemas.payment import Payment, PaymentOut
from finledger.services.dates import add_months, coerce_date, today
from finledger.services.finance import (
    annuity_balance,
    annuity_payment,
    days_left,
    months_between,
    round_money,
    to_number,
)

AMORTIZED_TYPES = {PaymentType.mortgage, PaymentType.loan}
MAX_BILLING_DAY = 28  # every month has it


def clamp_day(day) -> int:
    n = to_number(day, fallback=1)
    return min(max(1, round(n)), MAX_BILLING_DAY)


def _target_day(payment: Payment) -> int:
    if payment.type == PaymentType.utilities:
        return 1
    if payment.type in AMORTIZED_TYPES:
        return clamp_day(payment.day_of_month if payment.day_of_month is not None else payment.billing_day)
    return clamp_day(payment.billing_day)


def compute_next_due_date(payment: Payment, reference=None) -> date | None:
    """
    Next due date on or after ``reference``.

    Subscriptions with a renewal date return it verbatim, even when it is
    already in the past; callers decide what a stale renewal means.
    """
    ref = coerce_date(reference) or today()
    if payment.type is None:
        return None
    if payment.type == PaymentType.subscription and payment.renewal_date:
        return coerce_date(payment.renewal_date)

    candidate = date(ref.year, ref.month, _target_day(payment))
    if candidate < ref:
        candidate = add_months(candidate, 1)
    return candidate


def attach_payment_computed_fields(payment: Payment, reference=None) -> PaymentOut:
    ref = coerce_date(reference) or today()
    next_due = compute_next_due_date(payment, ref) or coerce_date(payment.renewal_date)

    annuity = None
    balance = None
    if payment.type in AMORTIZED_TYPES:
        principal = to_number(payment.principal_total)
        rate = to_number(payment.interest_rate_apy)
        term = to_number(payment.term_months)
        months_paid = months_between(payment.start_date, ref) if payment.start_date else 0
        annuity = round_money(annuity_payment(principal, rate, term))
        balance = round_money(annuity_balance(principal, rate, term, months_paid))

    return PaymentOut(
        **payment.model_dump(),
        next_due_date=next_due,
        days_left=days_left(next_due, ref) if next_due else None,
        annuity_payment=annuity,
        outstanding_balance=balance,
    )
