from datetime import date

import pandas as pd

from finledger.models.enums import ForecastPeriod, PaymentType
from finledger.models.schemas.account import Account
from finledger.models.schemas.category import Category
from finledger.models.schemas.dashboard import (
    AccountsSummary,
    CategorySlice,
    Dashboard,
    DashboardPreferences,
    Kpis,
    SubscriptionItem,
)
from finledger.models.schemas.income import Income
from finledger.models.schemas.payment import Payment, PaymentOut
from finledger.models.schemas.transaction import Transaction
from finledger.services.balances import summarize_account
from finledger.services.dates import coerce_date, month_range, today
from finledger.services.finance import round_money
from finledger.services.forecast import build_income_forecast
from finledger.services.schedule import attach_payment_computed_fields

PIE_TOP_CATEGORIES = 8
UPCOMING_LIMIT = 5
CRITICAL_DAYS = 3


def _month_frame(transactions: list[Transaction], start: date, end: date, base_currency: str) -> pd.DataFrame:
    df = pd.DataFrame(
        [tx.model_dump(include={"transaction_date", "category_id", "amount_account", "is_income", "currency_account"})
         for tx in transactions],
        columns=["transaction_date", "category_id", "amount_account", "is_income", "currency_account"],
    )
    if df.empty:
        return df
    df["amount_account"] = pd.to_numeric(df["amount_account"], errors="coerce").fillna(0.0)
    in_month = (df["transaction_date"] >= start) & (df["transaction_date"] < end)
    in_currency = df["currency_account"].isna() | (df["currency_account"] == base_currency)
    return df[in_month & in_currency]


def _kpis(df: pd.DataFrame) -> Kpis:
    if df.empty:
        return Kpis(incomes=0.0, expenses=0.0, balance=0.0)
    incomes = float(df.loc[df["is_income"].astype(bool), "amount_account"].sum())
    expenses = float(df.loc[~df["is_income"].astype(bool), "amount_account"].sum())
    return Kpis(
        incomes=round_money(incomes),
        expenses=round_money(expenses),
        balance=round_money(incomes - expenses),
    )


def _pie_by_category(df: pd.DataFrame, categories: list[Category]) -> list[CategorySlice]:
    if df.empty:
        return []
    expenses = df[~df["is_income"].astype(bool) & df["category_id"].notna()]
    if expenses.empty:
        return []
    by_id = {c.category_id: c for c in categories}
    totals = expenses.groupby("category_id")["amount_account"].sum().sort_values(ascending=False)

    slices = []
    for category_id, amount in totals.items():
        category = by_id.get(category_id)
        if category is None:
            continue
        slices.append(CategorySlice(
            category_id=category_id,
            name=category.name,
            color_hex=category.color_hex,
            amount=round_money(amount),
        ))
    return slices[:PIE_TOP_CATEGORIES]


def _upcoming(payments: list[PaymentOut], window_days: int) -> list[PaymentOut]:
    upcoming = [p for p in payments if p.days_left is not None and 0 <= p.days_left <= window_days]
    return sorted(upcoming, key=lambda p: p.days_left)[:UPCOMING_LIMIT]


def _subscriptions(payments: list[PaymentOut]) -> list[SubscriptionItem]:
    items = [
        SubscriptionItem(
            payment_id=p.payment_id,
            title=p.title,
            renewal_date=p.renewal_date or p.next_due_date,
            amount=p.amount,
            currency=p.currency,
            days_left=p.days_left,
            is_critical=p.days_left is not None and p.days_left < CRITICAL_DAYS,
            service_url=p.service_url,
        )
        for p in payments
        if p.type == PaymentType.subscription
    ]
    return sorted(items, key=lambda s: s.days_left if s.days_left is not None else 999)


def compose_dashboard(
    *,
    preferences: DashboardPreferences,
    transactions: list[Transaction],
    categories: list[Category],
    payments: list[Payment],
    accounts: list[Account],
    incomes: list[Income],
    base_currency: str,
    month: str | None = None,
    reference=None,
    upcoming_days: int = 7,
) -> Dashboard:
    """Assemble the dashboard widgets enabled in ``preferences``."""
    ref = coerce_date(reference) or today()
    start, end = month_range(month, ref)
    month_df = _month_frame(transactions, start, end, base_currency)
    active = [attach_payment_computed_fields(p, ref) for p in payments if p.is_active]

    dashboard = Dashboard(month=start.strftime("%Y-%m"), preferences=preferences)
    if preferences.show_kpis:
        dashboard.kpis = _kpis(month_df)
    if preferences.show_pie_categories:
        dashboard.pie_by_category = _pie_by_category(month_df, categories)
    if preferences.show_upcoming_payments:
        dashboard.upcoming_payments = _upcoming(active, upcoming_days)
    if preferences.show_subscriptions:
        dashboard.subscriptions = _subscriptions(active)
    if preferences.show_income_forecast:
        dashboard.income_forecast = build_income_forecast(
            incomes, ForecastPeriod.month, reference=ref, base_currency=base_currency
        )
    if preferences.show_accounts:
        items = [summarize_account(a, transactions) for a in accounts]
        dashboard.accounts_summary = AccountsSummary(
            total_balance=round_money(sum(a.actual_balance for a in items)),
            items=items,
        )
    return dashboard
