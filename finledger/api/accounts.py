from fastapi import APIRouter, Depends
from uuid import UUID
from finledger.config import settings
from finledger.models.schemas.account import Account, AccountCreate, AccountUpdate, AccountOut
from finledger.models.schemas.transaction import Transaction
from finledger.services.auth import get_current_user
from finledger.services.balances import reconcile_balance, summarize_account
from finledger.services.errors import LedgerValidationError
from finledger.services.storage import get_owned, load_current, save_version, update_record, soft_delete_record, log_action

router = APIRouter()


def _account_out(account: Account, user_id: str) -> AccountOut:
    transactions = load_current("transactions", Transaction, user_id=user_id)
    return summarize_account(account, transactions)


@router.post("/", response_model=AccountOut)
def create_account(payload: AccountCreate, user=Depends(get_current_user)):
    name = payload.name.strip()
    if not name:
        raise LedgerValidationError("Name is required")

    account = Account(
        user_id=user["user_id"],
        name=name,
        type=payload.type,
        currency=(payload.currency or settings.base_currency).upper(),
        initial_balance=payload.balance or 0.0,
        notes=payload.notes,
    )
    save_version(account, "accounts", "account_id")
    log_action(user["user_id"], "create", "accounts", str(account.account_id), payload.model_dump())
    return summarize_account(account, [])


@router.get("/", response_model=list[AccountOut])
def list_accounts(user=Depends(get_current_user)):
    accounts = load_current("accounts", Account, user_id=user["user_id"])
    transactions = load_current("transactions", Transaction, user_id=user["user_id"])
    accounts.sort(key=lambda a: a.created_at, reverse=True)
    return [summarize_account(a, transactions) for a in accounts]


@router.get("/{account_id}", response_model=AccountOut)
def get_account(account_id: UUID, user=Depends(get_current_user)):
    account = get_owned("accounts", Account, "account_id", account_id, user["user_id"])
    return _account_out(account, user["user_id"])


@router.patch("/{account_id}", response_model=AccountOut)
def update_account(account_id: UUID, payload: AccountUpdate, user=Depends(get_current_user)):
    account = get_owned("accounts", Account, "account_id", account_id, user["user_id"])

    changes = payload.model_dump(exclude_unset=True, exclude={"balance"})
    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip()
        if not changes["name"]:
            raise LedgerValidationError("Name cannot be empty")
    if changes.get("currency"):
        changes["currency"] = changes["currency"].upper()
    changes = {k: v for k, v in changes.items() if v is not None or k == "notes"}

    if changes:
        account = update_record(account.model_copy(update=changes), "accounts", "account_id")
        log_action(user["user_id"], "update", "accounts", str(account_id), changes)

    if payload.balance is not None:
        transactions = load_current("transactions", Transaction, user_id=user["user_id"])
        adjustment = reconcile_balance(account, transactions, payload.balance)
        if adjustment is not None:
            save_version(adjustment, "transactions", "transaction_id")
            log_action(user["user_id"], "reconcile", "accounts", str(account_id), {
                "target": payload.balance,
                "transaction_id": adjustment.transaction_id,
            })

    return _account_out(account, user["user_id"])


@router.delete("/{account_id}")
def delete_account(account_id: UUID, user=Depends(get_current_user)):
    account = get_owned("accounts", Account, "account_id", account_id, user["user_id"])
    return soft_delete_record(account, "accounts", "account_id", user_id=user["user_id"])
