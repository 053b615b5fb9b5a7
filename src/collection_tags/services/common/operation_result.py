"""Shared response envelope for reconciliation runs."""

from typing import Any

EMPTY_METRICS = {
    "scanned": 0,
    "checked": 0,
    "changed": 0,
    "updated": 0,
    "failed": 0,
    "collections": 0,
}


def operation_success(
    operation: str,
    metrics: dict[str, int],
    *,
    message: str | None = None,
    dry_run: bool = False,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a standardized success response."""
    payload: dict[str, Any] = {
        "success": metrics.get("failed", 0) == 0,
        "operation": operation,
        "status": "dry_run" if dry_run else "completed",
        "message": message,
        "metrics": metrics,
    }
    if extra:
        payload.update(extra)
    return payload


def operation_error(
    operation: str,
    error: str,
    metrics: dict[str, int] | None = None,
    *,
    details: Any = None,
    status: str = "failed",
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a standardized error response."""
    payload: dict[str, Any] = {
        "success": False,
        "operation": operation,
        "status": status,
        "error": error,
        "metrics": metrics or dict(EMPTY_METRICS),
    }
    if details is not None:
        payload["details"] = details
    if extra:
        payload.update(extra)
    return payload
