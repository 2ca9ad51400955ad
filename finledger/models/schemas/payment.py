from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone, date
from finledger.models.enums import PaymentType, BillingPeriod
from finledger.models.schemas.common import IsoDate, Money, Rate


class Payment(BaseModel):
    payment_id: UUID = Field(default_factory=uuid4)
    user_id: str
    title: str
    type: PaymentType
    is_active: bool = True
    notes: str | None = None
    billing_period: BillingPeriod | None = None
    billing_day: int | None = None
    day_of_month: int | None = None   # mortgages / loans
    start_date: date | None = None
    end_date: date | None = None
    renewal_date: date | None = None  # subscriptions
    service_url: str | None = None
    provider: str | None = None
    principal_total: float | None = None
    interest_rate_apy: float | None = None
    term_months: int | None = None
    is_annuity: bool = False
    is_indefinite: bool = False
    amount: float | None = None
    currency: str | None = None
    account_currency: str | None = None
    last_amount: float | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class PaymentCreate(BaseModel):
    title: str
    type: PaymentType
    is_active: bool = True
    notes: str | None = None
    billing_period: BillingPeriod | None = None
    billing_day: int | None = Field(default=None, ge=1, le=31)
    day_of_month: int | None = Field(default=None, ge=1, le=31)
    start_date: IsoDate | None = None
    end_date: IsoDate | None = None
    renewal_date: IsoDate | None = None
    service_url: str | None = None
    provider: str | None = None
    principal_total: Money | None = None
    interest_rate_apy: Rate | None = None
    term_months: int | None = Field(default=None, ge=0)
    is_annuity: bool = False
    is_indefinite: bool = False
    amount: Money | None = None
    currency: str | None = None
    account_currency: str | None = None
    last_amount: Money | None = None


class PaymentUpdate(BaseModel):
    """Mutable payment fields; anything not listed here cannot be patched."""

    title: str | None = None
    type: PaymentType | None = None
    is_active: bool | None = None
    notes: str | None = None
    billing_period: BillingPeriod | None = None
    billing_day: int | None = Field(default=None, ge=1, le=31)
    day_of_month: int | None = Field(default=None, ge=1, le=31)
    start_date: IsoDate | None = None
    end_date: IsoDate | None = None
    renewal_date: IsoDate | None = None
    service_url: str | None = None
    provider: str | None = None
    principal_total: Money | None = None
    interest_rate_apy: Rate | None = None
    term_months: int | None = Field(default=None, ge=0)
    is_annuity: bool | None = None
    is_indefinite: bool | None = None
    amount: Money | None = None
    currency: str | None = None
    account_currency: str | None = None
    last_amount: Money | None = None


class PaymentOut(Payment):
    next_due_date: date | None = None
    days_left: int | None = None
    annuity_payment: float | None = None
    outstanding_balance: float | None = None
