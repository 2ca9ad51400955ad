from fastapi import APIRouter, Depends
from uuid import UUID
from finledger.config import settings
from finledger.models.schemas.debt import Debt, DebtCreate, DebtUpdate, DebtOut, DebtPayment, DebtPaymentCreate
from finledger.services.auth import get_current_user
from finledger.services.dates import today
from finledger.services.debts import extend_debt_with_summary, submit_debt_payment
from finledger.services.errors import LedgerValidationError
from finledger.services.storage import get_owned, load_current, save_version, update_record, soft_delete_record, log_action

router = APIRouter()


def _payments_for(debt_id: UUID, user_id: str) -> list[DebtPayment]:
    return [p for p in load_current("debt_payments", DebtPayment, user_id=user_id) if p.debt_id == debt_id]


def _require_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise LedgerValidationError(f"{field} is required")
    return text


@router.get("/", response_model=list[DebtOut])
def list_debts(user=Depends(get_current_user)):
    debts = load_current("debts", Debt, user_id=user["user_id"])
    payments = load_current("debt_payments", DebtPayment, user_id=user["user_id"])

    by_debt: dict[UUID, list[DebtPayment]] = {}
    for payment in payments:
        by_debt.setdefault(payment.debt_id, []).append(payment)

    debts.sort(key=lambda d: d.created_at, reverse=True)
    return [extend_debt_with_summary(d, by_debt.get(d.debt_id, []), today()) for d in debts]


@router.get("/{debt_id}")
def get_debt(debt_id: UUID, user=Depends(get_current_user)):
    debt = get_owned("debts", Debt, "debt_id", debt_id, user["user_id"])
    payments = _payments_for(debt_id, user["user_id"])
    newest_first = sorted(payments, key=lambda p: (p.payment_date, p.created_at), reverse=True)
    return {
        "debt": extend_debt_with_summary(debt, payments, today()),
        "payments": newest_first,
    }


@router.post("/", response_model=DebtOut)
def create_debt(payload: DebtCreate, user=Depends(get_current_user)):
    debt = Debt(
        user_id=user["user_id"],
        title=_require_text(payload.title, "Title"),
        direction=payload.direction,
        counterparty=_require_text(payload.counterparty, "Counterparty"),
        bank_name=payload.bank_name,
        description=payload.description,
        principal_amount=payload.principal_amount,
        currency=(payload.currency or settings.base_currency).upper(),
        interest_rate_apy=payload.interest_rate_apy,
        start_date=payload.start_date or today(),
        due_date=payload.due_date,
        is_closed=payload.is_closed,
    )
    save_version(debt, "debts", "debt_id")
    log_action(user["user_id"], "create", "debts", str(debt.debt_id), payload.model_dump())
    return extend_debt_with_summary(debt, [], today())


@router.patch("/{debt_id}", response_model=DebtOut)
def update_debt(debt_id: UUID, payload: DebtUpdate, user=Depends(get_current_user)):
    debt = get_owned("debts", Debt, "debt_id", debt_id, user["user_id"])
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise LedgerValidationError("No fields to update")

    for field, label in (("title", "Title"), ("counterparty", "Counterparty")):
        if field in changes:
            changes[field] = _require_text(changes[field], label)
    for field in ("direction", "principal_amount", "is_closed"):
        if field in changes and changes[field] is None:
            raise LedgerValidationError(f"{field} cannot be empty")
    if "currency" in changes:
        changes["currency"] = (changes["currency"] or debt.currency).upper()

    debt = update_record(debt.model_copy(update=changes), "debts", "debt_id")
    log_action(user["user_id"], "update", "debts", str(debt_id), changes)
    return extend_debt_with_summary(debt, _payments_for(debt_id, user["user_id"]), today())


@router.delete("/{debt_id}")
def delete_debt(debt_id: UUID, user=Depends(get_current_user)):
    debt = get_owned("debts", Debt, "debt_id", debt_id, user["user_id"])
    return soft_delete_record(debt, "debts", "debt_id", user_id=user["user_id"])


@router.post("/{debt_id}/payments")
def add_debt_payment(debt_id: UUID, payload: DebtPaymentCreate, user=Depends(get_current_user)):
    debt = get_owned("debts", Debt, "debt_id", debt_id, user["user_id"])
    payments = _payments_for(debt_id, user["user_id"])
    return submit_debt_payment(debt, payments, payload, user["user_id"])
