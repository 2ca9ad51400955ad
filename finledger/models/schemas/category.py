from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from finledger.models.enums import CategoryType


class Category(BaseModel):
    category_id: UUID = Field(default_factory=uuid4)
    user_id: str
    name: str
    type: CategoryType
    color_hex: str | None = None
    is_system: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_current: bool = True
    is_deleted: bool = False


class CategoryCreate(BaseModel):
    name: str
    type: CategoryType
    color_hex: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = None
    color_hex: str | None = None
