"""Common utilities shared across services."""

from .cancellation import CancellationToken, ProgressCallback, ProgressReporter
from .operation_result import operation_error, operation_success
from .retry import async_retry_with_backoff, is_retryable

__all__ = [
    "CancellationToken",
    "ProgressCallback",
    "ProgressReporter",
    "async_retry_with_backoff",
    "is_retryable",
    "operation_error",
    "operation_success",
]
