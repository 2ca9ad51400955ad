from fastapi import APIRouter, Depends
from uuid import UUID
from finledger.models.schemas.category import Category, CategoryCreate, CategoryUpdate
from finledger.services.auth import get_current_user
from finledger.services.categories import ensure_system_categories
from finledger.services.errors import LedgerValidationError
from finledger.services.storage import get_owned, save_version, update_record, soft_delete_record, log_action

router = APIRouter()


def _ensure_unique(user_id: str, name: str, category_id: UUID | None = None) -> None:
    existing = ensure_system_categories(user_id)
    if any(c.name.lower() == name.lower() and c.category_id != category_id for c in existing):
        raise LedgerValidationError("Category already exists")


@router.get("/", response_model=list[Category])
def list_categories(user=Depends(get_current_user)):
    categories = ensure_system_categories(user["user_id"])
    return sorted(categories, key=lambda c: (not c.is_system, c.name.lower()))


@router.post("/", response_model=Category)
def create_category(payload: CategoryCreate, user=Depends(get_current_user)):
    name = payload.name.strip()
    if not name:
        raise LedgerValidationError("Name is required")
    _ensure_unique(user["user_id"], name)

    category = Category(user_id=user["user_id"], name=name, type=payload.type, color_hex=payload.color_hex)
    save_version(category, "categories", "category_id")
    log_action(user["user_id"], "create", "categories", str(category.category_id), payload.model_dump())
    return category


@router.patch("/{category_id}", response_model=Category)
def update_category(category_id: UUID, payload: CategoryUpdate, user=Depends(get_current_user)):
    category = get_owned("categories", Category, "category_id", category_id, user["user_id"])
    changes = payload.model_dump(exclude_unset=True)

    if "name" in changes:
        # System categories are looked up by name (utility placeholders)
        if category.is_system:
            raise LedgerValidationError("System categories cannot be renamed")
        changes["name"] = (changes["name"] or "").strip()
        if not changes["name"]:
            raise LedgerValidationError("Name cannot be empty")
        _ensure_unique(user["user_id"], changes["name"], category_id)
    if not changes:
        return category

    category = update_record(category.model_copy(update=changes), "categories", "category_id")
    log_action(user["user_id"], "update", "categories", str(category_id), changes)
    return category


@router.delete("/{category_id}")
def delete_category(category_id: UUID, user=Depends(get_current_user)):
    category = get_owned("categories", Category, "category_id", category_id, user["user_id"])
    if category.is_system:
        raise LedgerValidationError("System categories cannot be deleted")
    return soft_delete_record(category, "categories", "category_id", user_id=user["user_id"])
