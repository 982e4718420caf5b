"""Category domain service."""

from typing import Optional
from finport.database.base import Database
from finport.domain import errors
from finport.domain.entities import Category as CategoryEntity


class CategoryService:
    """Service for managing an owner's categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, owner_id: str, name: str) -> int:
        """Create a category.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the owner already has a category with that name
        """
        name = name.strip()
        if not name:
            raise errors.ValidationError("Category name cannot be empty")
        if self.find_by_name(owner_id, name) is not None:
            raise errors.ConflictError(f"Category '{name}' already exists")
        return self.db.create_category(owner_id=owner_id, name=name)

    def get_category(self, owner_id: str, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID, or None if the owner has no such category."""
        return self.db.get_category(owner_id, category_id)

    def require_category(self, owner_id: str, category_id: int) -> CategoryEntity:
        """Get category by ID.

        Raises:
            NotFoundError: If the owner has no such category
        """
        category = self.db.get_category(owner_id, category_id)
        if category is None:
            raise errors.NotFoundError(errors.category_not_found(category_id))
        return category

    def list_categories(self, owner_id: str) -> list[CategoryEntity]:
        """List the owner's categories."""
        return self.db.list_categories(owner_id)

    def find_by_name(self, owner_id: str, name: str) -> Optional[CategoryEntity]:
        """Find a category by name, ignoring case and surrounding whitespace."""
        wanted = name.strip().lower()
        for category in self.db.list_categories(owner_id):
            if category.name.strip().lower() == wanted:
                return category
        return None

    def name_index(self, owner_id: str) -> dict[str, int]:
        """Return lower-cased category names mapped to their IDs."""
        return {
            category.name.strip().lower(): category.id
            for category in self.db.list_categories(owner_id)
        }
