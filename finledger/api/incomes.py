from fastapi import APIRouter, Depends, Query
from uuid import UUID
from finledger.config import settings
from finledger.models.enums import ForecastPeriod, Periodicity
from finledger.models.schemas.income import Income, IncomeCreate, IncomeUpdate, IncomeForecast
from finledger.services.auth import get_current_user
from finledger.services.errors import LedgerValidationError
from finledger.services.forecast import build_income_forecast
from finledger.services.storage import get_owned, load_current, save_version, update_record, soft_delete_record, log_action

router = APIRouter()


@router.get("/", response_model=list[Income])
def list_incomes(user=Depends(get_current_user)):
    incomes = load_current("incomes", Income, user_id=user["user_id"])
    return sorted(incomes, key=lambda i: (i.next_date is None, i.next_date))


@router.get("/forecast", response_model=IncomeForecast)
def income_forecast(period: ForecastPeriod = Query(ForecastPeriod.month), user=Depends(get_current_user)):
    incomes = load_current("incomes", Income, user_id=user["user_id"])
    return build_income_forecast(incomes, period, base_currency=settings.base_currency)


@router.post("/", response_model=Income)
def create_income(payload: IncomeCreate, user=Depends(get_current_user)):
    source = payload.source_name.strip()
    if not source:
        raise LedgerValidationError("source_name is required")
    if payload.periodicity == Periodicity.custom_ndays and not payload.n_days:
        raise LedgerValidationError("n_days is required for custom cadence")

    income = Income(
        user_id=user["user_id"],
        source_name=source,
        amount=payload.amount,
        currency=payload.currency.upper(),
        periodicity=payload.periodicity,
        n_days=payload.n_days,
        next_date=payload.next_date,
        is_active=payload.is_active,
    )
    save_version(income, "incomes", "income_id")
    log_action(user["user_id"], "create", "incomes", str(income.income_id), payload.model_dump())
    return income


@router.patch("/{income_id}", response_model=Income)
def update_income(income_id: UUID, payload: IncomeUpdate, user=Depends(get_current_user)):
    income = get_owned("incomes", Income, "income_id", income_id, user["user_id"])
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise LedgerValidationError("No fields to update")

    for field in ("source_name", "amount", "periodicity", "is_active"):
        if field in changes and changes[field] is None:
            raise LedgerValidationError(f"{field} cannot be empty")
    if "source_name" in changes:
        changes["source_name"] = changes["source_name"].strip()
        if not changes["source_name"]:
            raise LedgerValidationError("source_name cannot be empty")
    if changes.get("currency"):
        changes["currency"] = changes["currency"].upper()

    updated = income.model_copy(update=changes)
    if updated.periodicity == Periodicity.custom_ndays and not updated.n_days:
        raise LedgerValidationError("n_days is required for custom cadence")

    updated = update_record(updated, "incomes", "income_id")
    log_action(user["user_id"], "update", "incomes", str(income_id), changes)
    return updated


@router.delete("/{income_id}")
def delete_income(income_id: UUID, user=Depends(get_current_user)):
    income = get_owned("incomes", Income, "income_id", income_id, user["user_id"])
    return soft_delete_record(income, "incomes", "income_id", user_id=user["user_id"])
