"""Debt interest accrual and the payment write path.

Interest accrues as simple interest on the outstanding principal with an
Actual/365 day count, one stub period per payment plus a tail period up to
the valuation date. A new payment first covers all interest currently due,
then principal (clamped to what is still outstanding).
"""
import logging
import math
from typing import Iterable

from finledger.models.schemas.debt import (
    Debt,
    DebtOut,
    DebtPayment,
    DebtPaymentCreate,
    DebtState,
    DebtSummary,
)
from finledger.services.dates import coerce_date, days_between, parse_iso_date, today
from finledger.services.errors import LedgerValidationError
from finledger.services.finance import round_money, to_number
from finledger.services.storage import log_action, save_version, update_record

logger = logging.getLogger(__name__)

DAY_COUNT_BASIS = 365
SETTLED_THRESHOLD = 0.01


def _sort_key(payment: DebtPayment):
    return (payment.payment_date or payment.created_at.date(), payment.created_at)


def _stub_interest(principal: float, rate: float, days: int) -> float:
    if rate > 0 and principal > 0 and days > 0:
        return principal * (rate / 100) * (days / DAY_COUNT_BASIS)
    return 0.0


def compute_debt_state(debt: Debt, payments: Iterable[DebtPayment] = (), as_of=None) -> DebtState:
    rate = to_number(debt.interest_rate_apy)
    ordered = sorted(payments, key=_sort_key)
    as_of_date = coerce_date(as_of) or today()

    outstanding_principal = to_number(debt.principal_amount)
    total_interest_accrued = 0.0
    total_interest_paid = 0.0
    total_principal_paid = 0.0
    cursor = debt.start_date or today()

    for payment in ordered:
        pay_date = payment.payment_date or as_of_date
        total_interest_accrued += _stub_interest(
            outstanding_principal, rate, days_between(cursor, pay_date)
        )
        principal_paid = to_number(payment.principal_paid)
        interest_paid = to_number(payment.interest_paid)
        total_principal_paid += principal_paid
        total_interest_paid += interest_paid
        outstanding_principal = max(0.0, outstanding_principal - principal_paid)
        cursor = pay_date

    # Tail accrual up to the valuation date
    total_interest_accrued += _stub_interest(
        outstanding_principal, rate, days_between(cursor, as_of_date)
    )

    accrued = round_money(total_interest_accrued)
    interest_due = max(0.0, round_money(accrued - total_interest_paid))

    return DebtState(
        outstanding_principal=round_money(outstanding_principal),
        accrued_interest=accrued,
        interest_due=interest_due,
        total_paid=round_money(total_principal_paid + total_interest_paid),
        total_interest_paid=round_money(total_interest_paid),
        last_payment_date=ordered[-1].payment_date if ordered else None,
    )


def summarize(state: DebtState) -> DebtSummary:
    return DebtSummary(
        **state.model_dump(),
        total_due=round_money(state.outstanding_principal + state.interest_due),
    )


def extend_debt_with_summary(debt: Debt, payments: Iterable[DebtPayment] = (), as_of=None) -> DebtOut:
    summary = summarize(compute_debt_state(debt, payments, as_of))
    return DebtOut(**debt.model_dump(), **summary.model_dump())


def is_settled(state: DebtState) -> bool:
    return (
        state.outstanding_principal <= SETTLED_THRESHOLD
        and state.interest_due <= SETTLED_THRESHOLD
    )


def _validate_principal(value) -> float:
    if value is None or isinstance(value, bool):
        raise LedgerValidationError("principal_amount is required")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise LedgerValidationError("principal_amount must be numeric")
    if not math.isfinite(amount) or amount <= 0:
        raise LedgerValidationError("principal_amount must be a positive number")
    return amount


def plan_debt_payment(
    debt: Debt,
    payments: list[DebtPayment],
    principal_amount,
    payment_date=None,
    comment: str | None = None,
) -> DebtPayment:
    """Build (without persisting) the payment a submission would record."""
    requested = _validate_principal(principal_amount)
    pay_date = parse_iso_date(payment_date, "payment_date") if payment_date else today()

    base_state = compute_debt_state(debt, payments, pay_date)
    principal_paid = min(requested, base_state.outstanding_principal)
    # Interest-first: the whole currently due interest rides on this payment
    interest_component = base_state.interest_due if to_number(debt.interest_rate_apy) > 0 else 0.0

    return DebtPayment(
        debt_id=debt.debt_id,
        user_id=debt.user_id,
        payment_date=pay_date,
        principal_paid=principal_paid,
        interest_paid=interest_component,
        amount_total=round_money(principal_paid + interest_component),
        comment=comment,
    )


def preview_debt_payment(debt: Debt, payments: list[DebtPayment], planned: DebtPayment) -> DebtSummary:
    return summarize(compute_debt_state(debt, [*payments, planned], planned.payment_date))


def submit_debt_payment(
    debt: Debt,
    payments: list[DebtPayment],
    request: DebtPaymentCreate,
    user_id: str,
) -> dict:
    """
    Dry-run or commit a debt payment.

    Commit persists the payment and flips ``is_closed`` when the post-payment
    state crosses the settled threshold (in either direction). Nothing is
    written in dry-run mode.
    """
    planned = plan_debt_payment(
        debt, payments, request.principal_amount, request.payment_date, request.comment
    )

    if request.dry_run:
        return {"preview": planned, "summary": preview_debt_payment(debt, payments, planned)}

    save_version(planned, "debt_payments", "debt_payment_id")
    log_action(user_id, "create", "debt_payments", str(planned.debt_payment_id), planned.model_dump())

    state_after = compute_debt_state(debt, [*payments, planned], planned.payment_date)
    should_close = is_settled(state_after)
    if should_close != debt.is_closed:
        update_record(debt.model_copy(update={"is_closed": should_close}), "debts", "debt_id")
        log_action(user_id, "update", "debts", str(debt.debt_id), {"is_closed": should_close})
        logger.info("Debt %s is_closed -> %s", debt.debt_id, should_close)

    return {"payment": planned, "summary": summarize(state_after), "is_closed": should_close}
