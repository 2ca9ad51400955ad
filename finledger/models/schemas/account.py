from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from finledger.models.enums import AccountType
from finledger.models.schemas.common import Money


class Account(BaseModel):
    account_id: UUID = Field(default_factory=uuid4)
    user_id: str
    name: str
    type: AccountType
    currency: str
    initial_balance: float = 0.0
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class AccountCreate(BaseModel):
    name: str
    type: AccountType
    currency: str | None = None
    balance: Money | None = None
    notes: str | None = None


class AccountUpdate(BaseModel):
    name: str | None = None
    type: AccountType | None = None
    currency: str | None = None
    notes: str | None = None
    # Target balance; a difference is booked as an adjustment transaction
    balance: float | None = Field(default=None, allow_inf_nan=False)


class AccountOut(BaseModel):
    account_id: UUID
    name: str
    type: AccountType
    currency: str
    initial_balance: float
    actual_balance: float
    transactions_count: int
    notes: str | None = None
    created_at: datetime
