"""Category domain exceptions."""

from machine_registry.services.exceptions import NotFoundError


class CategoryNotFound(NotFoundError):
    """Category not found."""

    code = "CATEGORY_NOT_FOUND"
    message = "Category not found"
