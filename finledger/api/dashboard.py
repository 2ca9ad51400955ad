from fastapi import APIRouter, Depends, Query
from finledger.config import settings
from finledger.models.schemas.account import Account
from finledger.models.schemas.dashboard import Dashboard, DashboardPreferences, DashboardPreferencesUpdate
from finledger.models.schemas.income import Income
from finledger.models.schemas.payment import Payment
from finledger.models.schemas.transaction import Transaction
from finledger.services.auth import get_current_user
from finledger.services.categories import ensure_system_categories
from finledger.services.dashboard import compose_dashboard
from finledger.services.errors import LedgerValidationError
from finledger.services.storage import load_current, save_version, update_record, log_action

router = APIRouter()


def ensure_dashboard_preferences(user_id: str) -> DashboardPreferences:
    existing = load_current("dashboard_preferences", DashboardPreferences, user_id=user_id)
    if existing:
        return existing[0]
    preferences = DashboardPreferences(user_id=user_id)
    save_version(preferences, "dashboard_preferences", "preferences_id")
    return preferences


@router.get("/", response_model=Dashboard)
def get_dashboard(
    month: str | None = Query(None, description="Month in YYYY-MM format"),
    user=Depends(get_current_user),
):
    user_id = user["user_id"]
    return compose_dashboard(
        preferences=ensure_dashboard_preferences(user_id),
        transactions=load_current("transactions", Transaction, user_id=user_id),
        categories=ensure_system_categories(user_id),
        payments=load_current("payments", Payment, user_id=user_id),
        accounts=load_current("accounts", Account, user_id=user_id),
        incomes=load_current("incomes", Income, user_id=user_id),
        base_currency=settings.base_currency,
        month=month,
        upcoming_days=settings.upcoming_payments_days,
    )


@router.get("/settings", response_model=DashboardPreferences)
def get_dashboard_settings(user=Depends(get_current_user)):
    return ensure_dashboard_preferences(user["user_id"])


@router.patch("/settings", response_model=DashboardPreferences)
def update_dashboard_settings(payload: DashboardPreferencesUpdate, user=Depends(get_current_user)):
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        raise LedgerValidationError("No fields provided")

    preferences = ensure_dashboard_preferences(user["user_id"])
    preferences = update_record(preferences.model_copy(update=changes), "dashboard_preferences", "preferences_id")
    log_action(user["user_id"], "update", "dashboard_preferences", str(preferences.preferences_id), changes)
    return preferences
