from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone, date
from finledger.models.enums import DebtDirection
from finledger.models.schemas.common import IsoDate, Rate


class Debt(BaseModel):
    debt_id: UUID = Field(default_factory=uuid4)
    user_id: str
    title: str
    direction: DebtDirection
    counterparty: str
    bank_name: str | None = None
    description: str | None = None
    principal_amount: float
    currency: str
    interest_rate_apy: float | None = None   # annual %
    start_date: date | None = None
    due_date: date | None = None
    is_closed: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class DebtCreate(BaseModel):
    title: str
    direction: DebtDirection
    counterparty: str
    bank_name: str | None = None
    description: str | None = None
    principal_amount: float = Field(gt=0, allow_inf_nan=False)
    currency: str | None = None
    interest_rate_apy: Rate | None = None
    start_date: IsoDate | None = None
    due_date: IsoDate | None = None
    is_closed: bool = False


class DebtUpdate(BaseModel):
    title: str | None = None
    direction: DebtDirection | None = None
    counterparty: str | None = None
    bank_name: str | None = None
    description: str | None = None
    principal_amount: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    currency: str | None = None
    interest_rate_apy: Rate | None = None
    start_date: IsoDate | None = None
    due_date: IsoDate | None = None
    is_closed: bool | None = None


class DebtPayment(BaseModel):
    debt_payment_id: UUID = Field(default_factory=uuid4)
    debt_id: UUID
    user_id: str
    payment_date: date
    principal_paid: float = 0.0
    interest_paid: float = 0.0
    amount_total: float = 0.0
    comment: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class DebtPaymentCreate(BaseModel):
    # Validated by the engine so that bad input maps onto LedgerValidationError
    payment_date: str | None = None
    principal_amount: float | None = None
    comment: str | None = None
    dry_run: bool = False


class DebtState(BaseModel):
    outstanding_principal: float
    accrued_interest: float
    interest_due: float
    total_paid: float
    total_interest_paid: float
    last_payment_date: date | None = None


class DebtSummary(DebtState):
    total_due: float


class DebtOut(Debt):
    outstanding_principal: float
    accrued_interest: float
    interest_due: float
    total_due: float
    total_paid: float
    total_interest_paid: float
    last_payment_date: date | None = None
