from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone, date
from finledger.models.schemas.common import IsoDate, Money


class Transaction(BaseModel):
    transaction_id: UUID = Field(default_factory=uuid4)
    user_id: str
    account_id: UUID | None = None
    category_id: UUID | None = None
    payment_id: UUID | None = None
    transaction_date: date
    description: str | None = None
    amount_operation: float | None = None
    currency_operation: str | None = None
    # Always a magnitude; the sign lives in is_income
    amount_account: float | None = Field(default=None, ge=0)
    currency_account: str | None = None
    authorization_code: str | None = None
    mcc: str | None = None
    is_income: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class TransactionCreate(BaseModel):
    transaction_date: IsoDate
    description: str | None = None
    account_id: UUID | None = None
    category_id: UUID | None = None
    payment_id: UUID | None = None
    amount_operation: Money | None = None
    currency_operation: str | None = None
    amount_account: Money | None = None
    currency_account: str | None = None
    authorization_code: str | None = None
    mcc: str | None = None
    is_income: bool = False


class TransactionUpdate(BaseModel):
    transaction_date: IsoDate | None = None
    category_id: UUID | None = None
    amount_account: Money | None = None
    currency_account: str | None = None
    account_id: UUID | None = None
