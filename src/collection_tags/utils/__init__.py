"""Shared utilities: errors and logging."""

from .errors import (
    CollectionTagsError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
)
from .logging_config import get_log_level, initialize_logging

__all__ = [
    "CollectionTagsError",
    "ConfigurationError",
    "NotFoundError",
    "PersistenceError",
    "get_log_level",
    "initialize_logging",
]
