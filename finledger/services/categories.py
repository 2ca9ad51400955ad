from uuid import UUID

from finledger.models.enums import CategoryType
from finledger.models.schemas.category import Category
from finledger.services.errors import LedgerValidationError
from finledger.services.storage import load_current, save_version

UTILITIES_CATEGORY = "Utilities"

SYSTEM_CATEGORY_SEEDS = [
    {"name": UTILITIES_CATEGORY, "type": CategoryType.expense, "color_hex": "#f97316"},
    {"name": "Mortgage", "type": CategoryType.expense, "color_hex": "#f97316"},
    {"name": "Loan", "type": CategoryType.expense, "color_hex": "#f97316"},
    {"name": "Mobile", "type": CategoryType.expense, "color_hex": "#0ea5e9"},
    {"name": "Subscriptions", "type": CategoryType.expense, "color_hex": "#a855f7"},
    {"name": "Salary", "type": CategoryType.income, "color_hex": "#10b981"},
    {"name": "One-off income", "type": CategoryType.income, "color_hex": "#34d399"},
    {"name": "Family support", "type": CategoryType.income, "color_hex": "#60a5fa"},
    {"name": "Refunds", "type": CategoryType.income, "color_hex": "#fbbf24"},
]


def ensure_system_categories(user_id: str) -> list[Category]:
    """Seed the missing system categories for a user; returns all of the user's categories."""
    existing = load_current("categories", Category, user_id=user_id)
    names = {c.name.lower() for c in existing}
    for seed in SYSTEM_CATEGORY_SEEDS:
        if seed["name"].lower() in names:
            continue
        category = Category(user_id=user_id, is_system=True, **seed)
        save_version(category, "categories", "category_id")
        existing.append(category)
    return existing


def derive_is_income(categories: list[Category], category_id: UUID | None, fallback: bool = False) -> bool:
    if category_id is None:
        return fallback
    for category in categories:
        if category.category_id == category_id:
            return category.type == CategoryType.income
    raise LedgerValidationError("Category not found")
