import logging
from fastapi import FastAPI
from finledger.config import settings
from finledger.api import accounts, categories, transactions, payments, debts, incomes, dashboard

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="finledger")


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
app.include_router(categories.router, prefix="/categories", tags=["Categories"])
app.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(debts.router, prefix="/debts", tags=["Debts"])
app.include_router(incomes.router, prefix="/incomes", tags=["Incomes"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
