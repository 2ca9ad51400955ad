from fastapi import APIRouter, Depends, Query
from uuid import UUID
from finledger.config import settings
from finledger.models.schemas.account import Account
from finledger.models.schemas.payment import Payment
from finledger.models.schemas.transaction import Transaction, TransactionCreate, TransactionUpdate
from finledger.services.auth import get_current_user
from finledger.services.categories import derive_is_income, ensure_system_categories
from finledger.services.dates import month_range
from finledger.services.errors import LedgerNotFoundError, LedgerValidationError
from finledger.services.storage import get_owned, load_current, save_version, update_record, soft_delete_record, log_action
from finledger.services.utils import page_params, paginate

router = APIRouter()


@router.post("/", response_model=Transaction)
def create_transaction(payload: TransactionCreate, user=Depends(get_current_user)):
    user_id = user["user_id"]

    if payload.payment_id is not None:
        try:
            get_owned("payments", Payment, "payment_id", payload.payment_id, user_id)
        except LedgerNotFoundError:
            raise LedgerValidationError("Payment not found")

    account = None
    if payload.account_id is not None:
        try:
            account = get_owned("accounts", Account, "account_id", payload.account_id, user_id)
        except LedgerNotFoundError:
            raise LedgerValidationError("Account not found")

    categories = ensure_system_categories(user_id) if payload.category_id else []
    is_income = derive_is_income(categories, payload.category_id, payload.is_income)

    currency_account = (payload.currency_account or (account.currency if account else None) or settings.base_currency).upper()
    currency_operation = (payload.currency_operation or currency_account).upper()

    tx = Transaction(
        user_id=user_id,
        account_id=payload.account_id,
        category_id=payload.category_id,
        payment_id=payload.payment_id,
        transaction_date=payload.transaction_date,
        description=payload.description,
        amount_operation=payload.amount_operation,
        currency_operation=currency_operation,
        amount_account=payload.amount_account,
        currency_account=currency_account,
        authorization_code=payload.authorization_code,
        mcc=payload.mcc,
        is_income=is_income,
    )
    save_version(tx, "transactions", "transaction_id")
    log_action(user_id, "create", "transactions", str(tx.transaction_id), payload.model_dump())
    return tx


@router.get("/", response_model=list[Transaction])
def list_transactions(
    month: str | None = Query(None, description="Month in YYYY-MM format"),
    account_id: UUID | None = Query(None),
    user=Depends(get_current_user),
    page=Depends(page_params),
):
    transactions = load_current("transactions", Transaction, user_id=user["user_id"])
    if month:
        start, end = month_range(month)
        transactions = [tx for tx in transactions if start <= tx.transaction_date < end]
    if account_id:
        transactions = [tx for tx in transactions if tx.account_id == account_id]

    transactions.sort(key=lambda tx: (tx.transaction_date, tx.created_at), reverse=True)
    return paginate(transactions, page)


@router.patch("/{transaction_id}", response_model=Transaction)
def update_transaction(transaction_id: UUID, payload: TransactionUpdate, user=Depends(get_current_user)):
    user_id = user["user_id"]
    tx = get_owned("transactions", Transaction, "transaction_id", transaction_id, user_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise LedgerValidationError("No fields to update")
    if "transaction_date" in changes and changes["transaction_date"] is None:
        raise LedgerValidationError("transaction_date cannot be empty")

    if changes.get("account_id") is not None:
        try:
            get_owned("accounts", Account, "account_id", changes["account_id"], user_id)
        except LedgerNotFoundError:
            raise LedgerValidationError("Account not found")
    if changes.get("currency_account"):
        changes["currency_account"] = changes["currency_account"].upper()
    if changes.get("category_id") is not None:
        # The category decides the direction of the transaction
        changes["is_income"] = derive_is_income(
            ensure_system_categories(user_id), changes["category_id"], tx.is_income
        )

    tx = update_record(tx.model_copy(update=changes), "transactions", "transaction_id")
    log_action(user_id, "update", "transactions", str(transaction_id), changes)
    return tx


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: UUID, user=Depends(get_current_user)):
    tx = get_owned("transactions", Transaction, "transaction_id", transaction_id, user["user_id"])
    return soft_delete_record(tx, "transactions", "transaction_id", user_id=user["user_id"])
