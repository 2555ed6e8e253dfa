"""Static category taxonomy."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from document_vault.domain.models import Category

UNCATEGORIZED = "Uncategorized"

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="electronics", name="Electronics"),
    Category(id="appliances", name="Appliances"),
    Category(id="furniture", name="Furniture"),
    Category(id="clothing", name="Clothing"),
    Category(id="documents", name="Documents"),
)


@dataclass(frozen=True)
class CategoryProvider:
    """Read-only lookup over a fixed set of categories."""

    categories: Sequence[Category] = DEFAULT_CATEGORIES
    _names: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(
            self, "_names", {category.id: category.name for category in self.categories}
        )

    def list_all(self) -> list[Category]:
        """Return categories in declaration order."""
        return list(self.categories)

    def resolve_name(self, category_id: str | None) -> str:
        """Return the display name for an id, or the uncategorized sentinel."""
        if not category_id:
            return UNCATEGORIZED
        return self._names.get(category_id, UNCATEGORIZED)

    def has_categories(self) -> bool:
        """Return whether a category is required when saving a document."""
        return bool(self.categories)
