"""
Periodic accounting jobs: utility placeholders, subscription and loan
reminders, and the income ``next_date`` ticker.

Every job is idempotent for a given day and isolates failures per entity:
one broken payment or income is logged and skipped, the rest still run.
"""
import logging
from datetime import date
from uuid import UUID

from finledger.models.enums import PaymentType
from finledger.models.schemas.category import Category
from finledger.models.schemas.income import Income
from finledger.models.schemas.payment import Payment
from finledger.models.schemas.transaction import Transaction
from finledger.services.categories import UTILITIES_CATEGORY
from finledger.services.dates import coerce_date, shift_date, today
from finledger.services.finance import days_left
from finledger.services.notifications import Notifier, notify
from finledger.services.schedule import AMORTIZED_TYPES, attach_payment_computed_fields
from finledger.services.storage import load_current, log_action, save_version, update_record

logger = logging.getLogger(__name__)

PLACEHOLDER_DESCRIPTION = "Utilities: enter the amount"
DEFAULT_DAYS_THRESHOLD = 3


class CategoryCache:
    """Category ids by ``(user_id, lower(name))``, loaded once per user."""

    def __init__(self):
        self._by_user: dict[str, dict[str, UUID]] = {}

    def get(self, user_id: str, name: str) -> UUID | None:
        user_id = str(user_id)
        if user_id not in self._by_user:
            self._by_user[user_id] = {
                c.name.lower(): c.category_id
                for c in load_current("categories", Category, user_id=user_id)
            }
        return self._by_user[user_id].get(name.lower())


def _month_key(d: date) -> tuple[int, int]:
    return d.year, d.month


def create_utility_placeholders(
    *,
    reference=None,
    notify_fn: Notifier = notify,
    categories: CategoryCache | None = None,
) -> list[Transaction]:
    ref = coerce_date(reference) or today()
    month_start = date(ref.year, ref.month, 1)
    cache = categories or CategoryCache()

    payments = [
        p for p in load_current("payments", Payment)
        if p.type == PaymentType.utilities and p.is_active
    ]
    # Idempotency key: (user, payment, month)
    booked = {
        (tx.user_id, tx.payment_id, _month_key(tx.transaction_date))
        for tx in load_current("transactions", Transaction)
        if tx.payment_id is not None
    }

    created = []
    for payment in payments:
        key = (payment.user_id, payment.payment_id, _month_key(month_start))
        if key in booked:
            continue
        try:
            tx = Transaction(
                user_id=payment.user_id,
                transaction_date=month_start,
                description=PLACEHOLDER_DESCRIPTION,
                category_id=cache.get(payment.user_id, UTILITIES_CATEGORY),
                payment_id=payment.payment_id,
                amount_account=0.0,
                is_income=False,
            )
            save_version(tx, "transactions", "transaction_id")
            booked.add(key)
            created.append(tx)
            log_action(None, "placeholder", "transactions", str(tx.transaction_id), {"payment_id": payment.payment_id})
            notify_fn(
                payment.user_id,
                "Utility bills",
                f"{payment.title}: enter the amount for this month",
                "/accounting/transactions",
            )
        except Exception:
            logger.exception("Utility placeholder failed for payment %s", payment.payment_id)

    logger.info("Utility placeholders created: %d", len(created))
    return created


def notify_expiring_subscriptions(
    days_threshold: int = DEFAULT_DAYS_THRESHOLD,
    *,
    reference=None,
    notify_fn: Notifier = notify,
) -> int:
    ref = coerce_date(reference) or today()
    subscriptions = [
        p for p in load_current("payments", Payment)
        if p.type == PaymentType.subscription and p.is_active and p.renewal_date
    ]

    sent = 0
    for sub in subscriptions:
        try:
            days = days_left(sub.renewal_date, ref)
            if days is None or days < 0 or days > days_threshold:
                continue
            notify_fn(
                sub.user_id,
                "Subscription renews soon",
                f"{sub.title}: {days} day(s) left",
                "/accounting/payments",
            )
            sent += 1
        except Exception:
            logger.exception("Subscription notice failed for payment %s", sub.payment_id)

    logger.info("Subscription notices sent: %d", sent)
    return sent


def notify_loan_payments(
    days_threshold: int = DEFAULT_DAYS_THRESHOLD,
    *,
    reference=None,
    notify_fn: Notifier = notify,
) -> int:
    ref = coerce_date(reference) or today()
    loans = [
        p for p in load_current("payments", Payment)
        if p.type in AMORTIZED_TYPES and p.is_active
    ]

    sent = 0
    for payment in loans:
        try:
            computed = attach_payment_computed_fields(payment, ref)
            days = computed.days_left
            if days is None or days < 0 or days > days_threshold:
                continue
            if computed.annuity_payment:
                amount_text = f"Payment ~{computed.annuity_payment} {payment.account_currency or ''}".strip()
            else:
                amount_text = "Time to make a payment"
            notify_fn(
                payment.user_id,
                f"Payment {payment.title}",
                f"{amount_text}. Due in {days} day(s)",
                "/accounting/payments",
            )
            sent += 1
        except Exception:
            logger.exception("Loan notice failed for payment %s", payment.payment_id)

    logger.info("Loan payment notices sent: %d", sent)
    return sent


def tick_incomes_for_today(*, reference=None, notify_fn: Notifier = notify) -> list[Income]:
    """Advance ``next_date`` of incomes due today and announce them."""
    ref = coerce_date(reference) or today()
    due = [
        i for i in load_current("incomes", Income)
        if i.is_active and i.next_date == ref
    ]

    advanced = []
    for income in due:
        try:
            next_date = shift_date(income.next_date, income.periodicity, income.n_days)
            if next_date:
                income = update_record(
                    income.model_copy(update={"next_date": next_date}), "incomes", "income_id"
                )
                log_action(None, "advance", "incomes", str(income.income_id), {"next_date": next_date})
                advanced.append(income)
            notify_fn(
                income.user_id,
                "Income expected",
                f"{income.source_name}: {income.amount} {income.currency or ''}".strip(),
                "/accounting/incomes",
            )
        except Exception:
            logger.exception("Income tick failed for income %s", income.income_id)

    logger.info("Incomes advanced: %d", len(advanced))
    return advanced


def run_all_jobs(
    *,
    reference=None,
    days_threshold: int = DEFAULT_DAYS_THRESHOLD,
    notify_fn: Notifier = notify,
) -> dict:
    ref = coerce_date(reference) or today()
    return {
        "utility_placeholders": len(create_utility_placeholders(
            reference=ref, notify_fn=notify_fn, categories=CategoryCache()
        )),
        "subscription_notices": notify_expiring_subscriptions(
            days_threshold, reference=ref, notify_fn=notify_fn
        ),
        "loan_notices": notify_loan_payments(days_threshold, reference=ref, notify_fn=notify_fn),
        "incomes_advanced": len(tick_incomes_for_today(reference=ref, notify_fn=notify_fn)),
    }
