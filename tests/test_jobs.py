# tests/test_jobs.py
from datetime import date

from finledger.models.enums import PaymentType, Periodicity
from finledger.models.schemas.income import Income
from finledger.models.schemas.notification import Notification
from finledger.models.schemas.payment import Payment
from finledger.models.schemas.transaction import Transaction
from finledger.services.categories import ensure_system_categories
from finledger.services.jobs import (
    PLACEHOLDER_DESCRIPTION,
    CategoryCache,
    create_utility_placeholders,
    notify_expiring_subscriptions,
    notify_loan_payments,
    run_all_jobs,
    tick_incomes_for_today,
)
from finledger.services.notifications import notify
from finledger.services.storage import load_current, save_version

REF = date(2024, 3, 5)


class Recorder:
    """Collects notifications instead of storing them; can fail on chosen titles."""

    def __init__(self, fail_on=()):
        self.sent = []
        self.fail_on = set(fail_on)

    def __call__(self, user_id, title, body, link=None):
        if any(marker in body for marker in self.fail_on):
            raise RuntimeError("inbox unavailable")
        self.sent.append((user_id, title, body, link))
        return True


def _payment(user_id="u1", **fields) -> Payment:
    payment = Payment(user_id=user_id, **fields)
    save_version(payment, "payments", "payment_id")
    return payment


def _income(user_id="u1", **fields) -> Income:
    income = Income(user_id=user_id, source_name="Salary", amount=1000, currency="RUB", **fields)
    save_version(income, "incomes", "income_id")
    return income


# --- utility placeholders ---

def test_utility_placeholder_is_idempotent_per_month():
    ensure_system_categories("u1")
    payment = _payment(title="Electricity", type=PaymentType.utilities)
    _payment(title="Water (paused)", type=PaymentType.utilities, is_active=False)
    _payment(title="Phone", type=PaymentType.mobile, billing_day=1)
    recorder = Recorder()

    created = create_utility_placeholders(reference=REF, notify_fn=recorder)
    assert len(created) == 1
    again = create_utility_placeholders(reference=date(2024, 3, 28), notify_fn=recorder)
    assert again == []

    stored = load_current("transactions", Transaction, user_id="u1")
    assert len(stored) == 1
    tx = stored[0]
    assert tx.payment_id == payment.payment_id
    assert tx.transaction_date == date(2024, 3, 1)
    assert tx.description == PLACEHOLDER_DESCRIPTION
    assert tx.amount_account == 0.0
    assert tx.is_income is False
    assert tx.category_id is not None
    assert len(recorder.sent) == 1

    # A new month gets its own placeholder
    assert len(create_utility_placeholders(reference=date(2024, 4, 2), notify_fn=recorder)) == 1


def test_placeholder_without_utilities_category():
    _payment(title="Electricity", type=PaymentType.utilities)
    created = create_utility_placeholders(reference=REF, notify_fn=Recorder(), categories=CategoryCache())
    assert created[0].category_id is None


def test_placeholder_notice_failure_does_not_stop_other_owners():
    _payment(user_id="u1", title="Electricity", type=PaymentType.utilities)
    _payment(user_id="u2", title="Heating", type=PaymentType.utilities)
    recorder = Recorder(fail_on=["Electricity"])

    created = create_utility_placeholders(reference=REF, notify_fn=recorder)

    assert len(created) == 2
    assert [s[0] for s in recorder.sent] == ["u2"]


# --- subscription notices ---

def test_subscription_notices_within_threshold():
    _payment(title="Video", type=PaymentType.subscription, renewal_date=date(2024, 3, 5))
    _payment(title="Music", type=PaymentType.subscription, renewal_date=date(2024, 3, 8))
    _payment(title="Cloud", type=PaymentType.subscription, renewal_date=date(2024, 3, 9))
    _payment(title="Expired", type=PaymentType.subscription, renewal_date=date(2024, 3, 1))
    _payment(title="Paused", type=PaymentType.subscription, renewal_date=date(2024, 3, 6), is_active=False)
    recorder = Recorder()

    sent = notify_expiring_subscriptions(3, reference=REF, notify_fn=recorder)

    assert sent == 2
    bodies = sorted(s[2] for s in recorder.sent)
    assert bodies == ["Music: 3 day(s) left", "Video: 0 day(s) left"]


def test_subscription_notice_failure_is_isolated():
    _payment(title="Video", type=PaymentType.subscription, renewal_date=date(2024, 3, 6))
    _payment(title="Music", type=PaymentType.subscription, renewal_date=date(2024, 3, 7))
    recorder = Recorder(fail_on=["Video"])

    assert notify_expiring_subscriptions(reference=REF, notify_fn=recorder) == 1
    assert recorder.sent[0][2].startswith("Music")


# --- loan notices ---

def test_loan_notices_include_annuity_amount():
    _payment(
        title="Car loan", type=PaymentType.loan, day_of_month=7, account_currency="RUB",
        principal_total=1200, interest_rate_apy=0, term_months=12,
    )
    _payment(title="Mortgage", type=PaymentType.mortgage, day_of_month=6)
    _payment(title="Far loan", type=PaymentType.loan, day_of_month=20, principal_total=1000, term_months=10)
    recorder = Recorder()

    assert notify_loan_payments(reference=REF, notify_fn=recorder) == 2

    by_title = {s[1]: s[2] for s in recorder.sent}
    assert by_title["Payment Car loan"] == "Payment ~100.0 RUB. Due in 2 day(s)"
    assert by_title["Payment Mortgage"] == "Time to make a payment. Due in 1 day(s)"


# --- income ticks ---

def test_income_due_today_is_advanced_once():
    due = _income(periodicity=Periodicity.monthly, next_date=REF)
    _income(periodicity=Periodicity.monthly, next_date=date(2024, 3, 6))
    _income(periodicity=Periodicity.monthly, next_date=REF, is_active=False)
    recorder = Recorder()

    advanced = tick_incomes_for_today(reference=REF, notify_fn=recorder)

    assert [i.income_id for i in advanced] == [due.income_id]
    assert advanced[0].next_date == date(2024, 4, 5)
    stored = {i.income_id: i for i in load_current("incomes", Income)}
    assert stored[due.income_id].next_date == date(2024, 4, 5)
    assert len(recorder.sent) == 1

    assert tick_incomes_for_today(reference=REF, notify_fn=recorder) == []


def test_custom_income_tick():
    due = _income(periodicity=Periodicity.custom_ndays, n_days=14, next_date=REF)
    advanced = tick_incomes_for_today(reference=REF, notify_fn=Recorder())
    assert advanced[0].income_id == due.income_id
    assert advanced[0].next_date == date(2024, 3, 19)


# --- runner & inbox ---

def test_run_all_jobs_summary():
    _payment(title="Electricity", type=PaymentType.utilities)
    _payment(title="Video", type=PaymentType.subscription, renewal_date=date(2024, 3, 6))
    _income(periodicity=Periodicity.quarterly, next_date=REF)

    result = run_all_jobs(reference=REF, notify_fn=Recorder())
    assert result == {
        "utility_placeholders": 1,
        "subscription_notices": 1,
        "loan_notices": 0,
        "incomes_advanced": 1,
    }


def test_notify_stores_inbox_message():
    assert notify("u1", "Hello", "Body text", "/accounting") is True
    inbox = load_current("notifications", Notification, user_id="u1")
    assert len(inbox) == 1
    assert inbox[0].title == "Hello"
    assert inbox[0].is_read is False


def test_run_jobs_script(monkeypatch):
    from scripts import run_jobs

    calls = {}

    def fake_run_all_jobs(**kwargs):
        calls.update(kwargs)
        return {"utility_placeholders": 0}

    monkeypatch.setattr(run_jobs, "run_all_jobs", fake_run_all_jobs)
    assert run_jobs.main(["--date", "2024-03-05", "--days-threshold", "5"]) == {"utility_placeholders": 0}
    assert calls == {"reference": date(2024, 3, 5), "days_threshold": 5}
