# tests/test_schedule.py
from datetime import date

import pytest

from finledger.models.enums import PaymentType
from finledger.models.schemas.payment import Payment
from finledger.services.finance import annuity_balance, round_money
from finledger.services.schedule import (
    attach_payment_computed_fields,
    clamp_day,
    compute_next_due_date,
)


def _payment(type_: PaymentType, **fields) -> Payment:
    return Payment(user_id="u1", title=f"{type_.value} payment", type=type_, **fields)


def test_clamp_day():
    assert clamp_day(31) == 28
    assert clamp_day(0) == 1
    assert clamp_day(None) == 1
    assert clamp_day(15) == 15


def test_billing_day_later_this_month():
    p = _payment(PaymentType.mobile, billing_day=31)
    assert compute_next_due_date(p, date(2024, 3, 10)) == date(2024, 3, 28)


def test_billing_day_already_passed_rolls_to_next_month():
    p = _payment(PaymentType.parking_rent, billing_day=5)
    assert compute_next_due_date(p, date(2024, 3, 10)) == date(2024, 4, 5)
    assert compute_next_due_date(p, date(2024, 12, 10)) == date(2025, 1, 5)


def test_billing_day_today_is_due_today():
    p = _payment(PaymentType.mobile, billing_day=10)
    out = attach_payment_computed_fields(p, date(2024, 3, 10))
    assert out.next_due_date == date(2024, 3, 10)
    assert out.days_left == 0


def test_utilities_are_due_on_the_first():
    p = _payment(PaymentType.utilities, billing_day=20)
    assert compute_next_due_date(p, date(2024, 3, 1)) == date(2024, 3, 1)
    assert compute_next_due_date(p, date(2024, 3, 2)) == date(2024, 4, 1)


def test_loans_prefer_day_of_month():
    p = _payment(PaymentType.loan, billing_day=3, day_of_month=15)
    assert compute_next_due_date(p, date(2024, 3, 10)) == date(2024, 3, 15)

    fallback = _payment(PaymentType.mortgage, billing_day=20)
    assert compute_next_due_date(fallback, date(2024, 3, 10)) == date(2024, 3, 20)


def test_subscription_renewal_is_returned_verbatim():
    p = _payment(PaymentType.subscription, billing_day=1, renewal_date=date(2024, 2, 1))
    out = attach_payment_computed_fields(p, date(2024, 3, 10))
    assert out.next_due_date == date(2024, 2, 1)
    assert out.days_left == -38


def test_subscription_without_renewal_uses_billing_day():
    p = _payment(PaymentType.subscription, billing_day=12)
    assert compute_next_due_date(p, date(2024, 3, 10)) == date(2024, 3, 12)


def test_loan_gets_annuity_fields():
    p = _payment(
        PaymentType.loan,
        day_of_month=15,
        principal_total=120000,
        interest_rate_apy=12,
        term_months=12,
        start_date=date(2024, 1, 15),
    )
    out = attach_payment_computed_fields(p, date(2024, 4, 10))

    assert out.annuity_payment == pytest.approx(10661.85, abs=0.05)
    assert out.outstanding_balance == round_money(annuity_balance(120000, 12, 12, 3))
    assert 0 < out.outstanding_balance < 120000
    assert out.days_left == 5


def test_loan_without_terms_degrades_to_zero():
    out = attach_payment_computed_fields(_payment(PaymentType.mortgage, day_of_month=1), date(2024, 4, 10))
    assert out.annuity_payment == 0.0
    assert out.outstanding_balance == 0.0


def test_non_amortized_payment_has_no_annuity_fields():
    out = attach_payment_computed_fields(_payment(PaymentType.mobile, billing_day=5, amount=500), date(2024, 4, 10))
    assert out.annuity_payment is None
    assert out.outstanding_balance is None
