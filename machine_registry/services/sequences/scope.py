"""Sequence scope and slug resolution."""

from dataclasses import dataclass

from machine_registry.services.categories.category_service import CategoryService
from machine_registry.services.categories.exceptions import CategoryNotFound
from machine_registry.services.sequences.exceptions import ReferenceNotFound


@dataclass(frozen=True)
class SequenceScope:
    """Category, optionally narrowed to a subcategory, that a counter is bound to.

    A scope without a subcategory is category-wide and acts as the fallback
    for subcategories that have no dedicated configuration.
    """

    category_id: str
    subcategory_id: str | None = None

    def __post_init__(self) -> None:
        # Blank subcategory means category-wide
        if self.subcategory_id is not None and not self.subcategory_id.strip():
            object.__setattr__(self, "subcategory_id", None)

    @property
    def is_category_wide(self) -> bool:
        return self.subcategory_id is None

    def category_wide(self) -> "SequenceScope":
        return SequenceScope(self.category_id)


@dataclass(frozen=True)
class ScopeSlugs:
    """Slugs substituted for ``{category}`` and ``{subcategory}``."""

    category: str
    subcategory: str | None = None


async def resolve_scope_slugs(categories: CategoryService, scope: SequenceScope) -> ScopeSlugs:
    """Look up the category (and subcategory) slugs for a scope.

    Raises:
        ReferenceNotFound: If either category no longer exists.
    """
    try:
        category = await categories.get_category(scope.category_id)
        subcategory = await categories.get_category(scope.subcategory_id) if scope.subcategory_id else None
    except CategoryNotFound as e:
        raise ReferenceNotFound(str(e)) from e
    return ScopeSlugs(category=category.slug, subcategory=subcategory.slug if subcategory else None)
