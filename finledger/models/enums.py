from enum import Enum


class PaymentType(str, Enum):
    mortgage = "mortgage"
    loan = "loan"
    utilities = "utilities"
    parking_rent = "parking_rent"
    mobile = "mobile"
    subscription = "subscription"


class BillingPeriod(str, Enum):
    monthly = "monthly"
    weekly = "weekly"
    yearly = "yearly"
    custom = "custom"


class CategoryType(str, Enum):
    expense = "expense"
    income = "income"


class AccountType(str, Enum):
    card = "card"
    cash = "cash"
    deposit = "deposit"
    other = "other"


class DebtDirection(str, Enum):
    borrowed = "borrowed"
    lent = "lent"


class Periodicity(str, Enum):
    monthly = "monthly"
    quarterly = "quarterly"
    custom_ndays = "custom_ndays"


class ForecastPeriod(str, Enum):
    month = "month"
    year = "year"
