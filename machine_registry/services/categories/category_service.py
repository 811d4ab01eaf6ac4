"""Category lookup service.

Category tree management is handled elsewhere; this service only exposes
the read access the sequence engine needs.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from machine_registry.models.category import Category
from machine_registry.services.categories.exceptions import CategoryNotFound


class CategoryService:
    """Read-only access to categories."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_category(self, category_id: str) -> Category | None:
        """Get category by id, or None if it does not exist."""
        return await self.session.get(Category, category_id)

    async def get_category(self, category_id: str) -> Category:
        """Get category by id."""
        category = await self.find_category(category_id)
        if category is None:
            raise CategoryNotFound(f"Category {category_id} not found")
        return category

    async def create_category(
        self,
        *,
        name: str,
        slug: str,
        parent_id: str | None = None,
    ) -> Category:
        """Create a category; ``parent_id`` makes it a subcategory."""
        level = 0
        if parent_id is not None:
            parent = await self.get_category(parent_id)
            level = parent.level + 1

        category = Category(name=name, slug=slug, parent_id=parent_id, level=level)
        self.session.add(category)
        await self.session.commit()
        return category
