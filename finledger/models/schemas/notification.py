from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone


class Notification(BaseModel):
    notification_id: UUID = Field(default_factory=uuid4)
    user_id: str
    title: str
    body: str
    link: str | None = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False
