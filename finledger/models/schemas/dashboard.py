from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone, date
from finledger.models.schemas.account import AccountOut
from finledger.models.schemas.income import IncomeForecast
from finledger.models.schemas.payment import PaymentOut


class DashboardPreferences(BaseModel):
    preferences_id: UUID = Field(default_factory=uuid4)
    user_id: str
    show_kpis: bool = True
    show_pie_categories: bool = True
    show_upcoming_payments: bool = True
    show_subscriptions: bool = True
    show_income_forecast: bool = True
    show_accounts: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class DashboardPreferencesUpdate(BaseModel):
    show_kpis: bool | None = None
    show_pie_categories: bool | None = None
    show_upcoming_payments: bool | None = None
    show_subscriptions: bool | None = None
    show_income_forecast: bool | None = None
    show_accounts: bool | None = None


class Kpis(BaseModel):
    incomes: float
    expenses: float
    balance: float


class CategorySlice(BaseModel):
    category_id: UUID
    name: str
    color_hex: str | None = None
    amount: float


class SubscriptionItem(BaseModel):
    payment_id: UUID
    title: str
    renewal_date: date | None = None
    amount: float | None = None
    currency: str | None = None
    days_left: int | None = None
    is_critical: bool
    service_url: str | None = None


class AccountsSummary(BaseModel):
    total_balance: float
    items: list[AccountOut]


class Dashboard(BaseModel):
    month: str
    preferences: DashboardPreferences
    kpis: Kpis | None = None
    pie_by_category: list[CategorySlice] | None = None
    upcoming_payments: list[PaymentOut] | None = None
    subscriptions: list[SubscriptionItem] | None = None
    income_forecast: IncomeForecast | None = None
    accounts_summary: AccountsSummary | None = None
