import math
from typing import Iterable

from finledger.models.schemas.account import Account, AccountOut
from finledger.models.schemas.transaction import Transaction
from finledger.services.dates import coerce_date, today
from finledger.services.finance import round_money, to_number

RECONCILE_TOLERANCE = 0.01


def signed_amount(tx: Transaction) -> float:
    amount = to_number(tx.amount_account)
    return amount if tx.is_income else -amount


def _for_account(account: Account, transactions: Iterable[Transaction]) -> list[Transaction]:
    return [tx for tx in transactions if tx.account_id == account.account_id]


def account_balance(account: Account, transactions: Iterable[Transaction]) -> float:
    # fsum is exact, so the result does not depend on transaction order
    own = _for_account(account, transactions)
    return round_money(math.fsum([to_number(account.initial_balance), *(signed_amount(tx) for tx in own)]))


def summarize_account(account: Account, transactions: Iterable[Transaction]) -> AccountOut:
    own = _for_account(account, transactions)
    return AccountOut(
        account_id=account.account_id,
        name=account.name,
        type=account.type,
        currency=account.currency,
        initial_balance=round_money(account.initial_balance),
        actual_balance=account_balance(account, own),
        transactions_count=len(own),
        notes=account.notes,
        created_at=account.created_at,
    )


def reconcile_balance(
    account: Account,
    transactions: Iterable[Transaction],
    target,
    reference=None,
) -> Transaction | None:
    """Adjustment transaction that brings the derived balance to ``target``."""
    actual = account_balance(account, transactions)
    diff = round_money(to_number(target) - actual)
    if abs(diff) < RECONCILE_TOLERANCE:
        return None

    return Transaction(
        user_id=account.user_id,
        account_id=account.account_id,
        transaction_date=coerce_date(reference) or today(),
        description=f"Balance adjustment ({account.name})",
        amount_operation=abs(diff),
        currency_operation=account.currency,
        amount_account=abs(diff),
        currency_account=account.currency,
        is_income=diff > 0,
    )
