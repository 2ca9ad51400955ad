import re
from datetime import date
from typing import Annotated
from pydantic import BeforeValidator, Field

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _iso_date(value):
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("date must be YYYY-MM-DD")
    return value


# Request-side field types: strict ISO dates and finite non-negative money
IsoDate = Annotated[date, BeforeValidator(_iso_date)]
Money = Annotated[float, Field(ge=0, allow_inf_nan=False)]
Rate = Annotated[float, Field(ge=0, allow_inf_nan=False)]
