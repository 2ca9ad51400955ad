from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone, date
from finledger.models.enums import Periodicity, ForecastPeriod
from finledger.models.schemas.common import IsoDate


class Income(BaseModel):
    income_id: UUID = Field(default_factory=uuid4)
    user_id: str
    source_name: str
    amount: float
    currency: str | None = None
    periodicity: Periodicity
    n_days: int | None = None   # custom_ndays only
    next_date: date | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class IncomeCreate(BaseModel):
    source_name: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    currency: str
    periodicity: Periodicity
    n_days: int | None = Field(default=None, ge=1)
    next_date: IsoDate
    is_active: bool = True


class IncomeUpdate(BaseModel):
    source_name: str | None = None
    amount: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    currency: str | None = None
    periodicity: Periodicity | None = None
    n_days: int | None = Field(default=None, ge=1)
    next_date: IsoDate | None = None
    is_active: bool | None = None


class ForecastItem(BaseModel):
    date: str   # YYYY-MM-DD (month) or YYYY-MM (year)
    amount: float


class IncomeForecast(BaseModel):
    period: ForecastPeriod
    total: float
    items: list[ForecastItem]
