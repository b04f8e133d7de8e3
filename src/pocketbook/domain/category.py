"""Category domain service."""

from typing import Optional

from pocketbook.database.base import DataGateway
from pocketbook.domain.entities import Category, CategoryAmount, TransactionKind
from pocketbook.domain.errors import NotFoundError, ValidationError, category_not_found

# Default categories created by init-categories
DEFAULT_CATEGORIES = [
    ("Salary", TransactionKind.INCOME),
    ("Investments", TransactionKind.INCOME),
    ("Other Income", TransactionKind.INCOME),
    ("Food", TransactionKind.EXPENSE),
    ("Transport", TransactionKind.EXPENSE),
    ("Housing", TransactionKind.EXPENSE),
    ("Entertainment", TransactionKind.EXPENSE),
    ("Health", TransactionKind.EXPENSE),
    ("Education", TransactionKind.EXPENSE),
    ("Other Expenses", TransactionKind.EXPENSE),
]


class CategoryService:
    """Service for managing categories."""

    def __init__(self, gateway: DataGateway):
        """Initialize category service.

        Args:
            gateway: Data gateway instance
        """
        self.gateway = gateway

    async def list_categories(self, kind: Optional[TransactionKind] = None) -> list[Category]:
        """List categories, optionally only those of one kind."""
        categories = await self.gateway.list_categories()
        if kind is None:
            return categories
        kind = TransactionKind.parse(kind)
        return [cat for cat in categories if cat.kind is kind]

    async def create_category(self, name: str, kind: TransactionKind) -> Category:
        """Create a category.

        Raises:
            ValidationError: If the name is blank or the kind is unknown
            ConflictError: If a category with this name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        return await self.gateway.create_category(name, TransactionKind.parse(kind))

    async def init_defaults(self) -> list[Category]:
        """Create the default categories that do not exist yet.

        Returns:
            The categories created by this call
        """
        existing = {cat.name.lower() for cat in await self.gateway.list_categories()}
        created = []
        for name, kind in DEFAULT_CATEGORIES:
            if name.lower() not in existing:
                created.append(await self.gateway.create_category(name, kind))
        return created

    async def resolve(self, name_or_id: str) -> Category:
        """Find a category by id or case-insensitive name.

        Raises:
            NotFoundError: If nothing matches
        """
        categories = await self.gateway.list_categories()
        for cat in categories:
            if cat.id == name_or_id:
                return cat
        wanted = name_or_id.strip().lower()
        for cat in categories:
            if cat.name.lower() == wanted:
                return cat
        raise NotFoundError(category_not_found(name_or_id))

    async def labels(self) -> dict[str, str]:
        """Map category ids to display names."""
        return {cat.id: cat.name for cat in await self.gateway.list_categories()}


def category_label(category_id: Optional[str], labels: dict[str, str]) -> str:
    """Display name of a category id; unknown ids are shown raw."""
    if category_id is None:
        return "Uncategorized"
    return labels.get(category_id, category_id)


def label_breakdown(
    breakdown: list[CategoryAmount], labels: dict[str, str]
) -> list[tuple[str, CategoryAmount]]:
    """Pair each breakdown entry with its category's display name."""
    return [(category_label(entry.category_id, labels), entry) for entry in breakdown]
