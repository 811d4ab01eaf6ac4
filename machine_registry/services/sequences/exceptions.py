"""Sequence management domain exceptions."""

from machine_registry.services.exceptions import ConflictError, NotFoundError, ServiceError, ValidationError


class ConfigNotFound(NotFoundError):
    """No sequence configuration for the scope, nor a category-wide fallback."""

    code = "SEQUENCE_MANAGEMENT_NOT_FOUND"
    message = "Sequence management configuration not found"


class ReferenceNotFound(NotFoundError):
    """Category or subcategory referenced by a scope does not exist."""

    code = "CATEGORY_NOT_FOUND"
    message = "Category not found"


class DuplicateConfig(ConflictError):
    """Sequence configuration already exists for the scope."""

    code = "DUPLICATE_SEQUENCE_CONFIG"
    message = "Sequence configuration already exists for this category/subcategory combination"


class InvalidTemplate(ValidationError):
    """Template is missing a required placeholder."""

    code = "INVALID_SEQUENCE_FORMAT"
    message = "Sequence format must contain {category} and {sequence} placeholders"


class InvalidPrefix(ValidationError):
    """Prefix is not 1-10 uppercase letters, digits or hyphens."""

    code = "INVALID_SEQUENCE_PREFIX"
    message = "Sequence prefix can only contain uppercase letters, numbers, and hyphens (max 10 characters)"


class InvalidStartingNumber(ValidationError):
    """Starting number is below 1."""

    code = "INVALID_STARTING_NUMBER"
    message = "Starting number must be at least 1"


class GenerationExhausted(ServiceError):
    """No free identifier found within the retry budget.

    Indicates duplicate identifiers in the machine table or a template that
    collapses many numbers to the same string. Never retried automatically.
    """

    code = "SEQUENCE_GENERATION_FAILED"
    message = (
        "Unable to generate a unique sequence after multiple attempts. "
        "Please check for duplicate sequences in the database."
    )

    def __init__(self, config_id: str, attempts: int):
        self.config_id = config_id
        self.attempts = attempts
        super().__init__()
