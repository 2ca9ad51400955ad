from fastapi import APIRouter, Depends, Query
from uuid import UUID
from finledger.models.enums import PaymentType
from finledger.models.schemas.payment import Payment, PaymentCreate, PaymentUpdate, PaymentOut
from finledger.models.schemas.transaction import Transaction
from finledger.services.auth import get_current_user
from finledger.services.errors import LedgerValidationError
from finledger.services.schedule import attach_payment_computed_fields
from finledger.services.storage import get_owned, load_current, save_version, update_record, soft_delete_record, log_action

router = APIRouter()

CURRENCY_FIELDS = ("currency", "account_currency")
HISTORY_LIMIT = 200


def _normalize(fields: dict) -> dict:
    for key in CURRENCY_FIELDS:
        if fields.get(key):
            fields[key] = fields[key].upper()
    if "title" in fields:
        fields["title"] = (fields["title"] or "").strip()
        if not fields["title"]:
            raise LedgerValidationError("Title is required")
    return fields


@router.get("/", response_model=list[PaymentOut])
def list_payments(
    type: PaymentType | None = Query(None),
    active: bool | None = Query(None),
    user=Depends(get_current_user),
):
    payments = load_current("payments", Payment, user_id=user["user_id"])
    if type is not None:
        payments = [p for p in payments if p.type == type]
    if active is not None:
        payments = [p for p in payments if p.is_active == active]
    payments.sort(key=lambda p: p.created_at, reverse=True)
    return [attach_payment_computed_fields(p) for p in payments]


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: UUID, user=Depends(get_current_user)):
    payment = get_owned("payments", Payment, "payment_id", payment_id, user["user_id"])
    return attach_payment_computed_fields(payment)


@router.get("/{payment_id}/history", response_model=list[Transaction])
def payment_history(payment_id: UUID, user=Depends(get_current_user)):
    """Transactions booked against a payment, newest first."""
    get_owned("payments", Payment, "payment_id", payment_id, user["user_id"])
    linked = [
        tx for tx in load_current("transactions", Transaction, user_id=user["user_id"])
        if tx.payment_id == payment_id
    ]
    linked.sort(key=lambda tx: (tx.transaction_date, tx.created_at), reverse=True)
    return linked[:HISTORY_LIMIT]


@router.post("/", response_model=PaymentOut)
def create_payment(payload: PaymentCreate, user=Depends(get_current_user)):
    fields = _normalize(payload.model_dump())
    payment = Payment(user_id=user["user_id"], **fields)
    save_version(payment, "payments", "payment_id")
    log_action(user["user_id"], "create", "payments", str(payment.payment_id), payload.model_dump())
    return attach_payment_computed_fields(payment)


@router.patch("/{payment_id}", response_model=PaymentOut)
def update_payment(payment_id: UUID, payload: PaymentUpdate, user=Depends(get_current_user)):
    payment = get_owned("payments", Payment, "payment_id", payment_id, user["user_id"])
    changes = _normalize(payload.model_dump(exclude_unset=True))
    if "type" in changes and changes["type"] is None:
        raise LedgerValidationError("Invalid payment type")
    if not changes:
        return attach_payment_computed_fields(payment)

    payment = update_record(payment.model_copy(update=changes), "payments", "payment_id")
    log_action(user["user_id"], "update", "payments", str(payment_id), changes)
    # Recomputed on every read: edits to rate/term/start date apply immediately
    return attach_payment_computed_fields(payment)


@router.delete("/{payment_id}")
def delete_payment(payment_id: UUID, user=Depends(get_current_user)):
    payment = get_owned("payments", Payment, "payment_id", payment_id, user["user_id"])
    return soft_delete_record(payment, "payments", "payment_id", user_id=user["user_id"])
