from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone


class AuditLog(BaseModel):
    log_id: UUID = Field(default_factory=uuid4)
    user_id: str | None = None  # None for scheduled jobs
    action: str  # "create", "update", "delete", "payment", "reconcile", ...
    resource_type: str  # "accounts", "debts", "transactions", ...
    resource_id: str | None = None
    details: str | None = None  # JSON payload
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False
