"""
Unified error handling for collection tags.
"""


class CollectionTagsError(Exception):
    """Base exception for collection tag errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}. {self.suggestion}"
        return self.message


class ConfigurationError(CollectionTagsError):
    """Configuration error."""

    pass


class NotFoundError(CollectionTagsError):
    """Item or collection not found in the library."""

    pass


class PersistenceError(CollectionTagsError):
    """Writing an item back to the library failed."""

    def __init__(
        self, message: str, item_id: str | None = None, suggestion: str | None = None
    ):
        super().__init__(message, suggestion)
        self.item_id = item_id
