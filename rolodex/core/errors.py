"""
Error classification for duplicate detection and merging.

Every error carries the HTTP status the API layer should answer with,
so routes translate errors without re-deciding what they mean.
"""

from typing import Any, Dict, List, Optional


class DedupError(Exception):
    """
    Base exception for the dedup engine.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status code the API should return
        details: Extra structured context for logging
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.message} (HTTP {self.status_code})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }


class ValidationError(DedupError):
    """
    Request validation failed - missing, equal or malformed parameters.

    Raised before any transaction is opened.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request parameters",
        invalid_params: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message=message, details={"invalid_params": invalid_params or {}})
        self.invalid_params = invalid_params or {}


class NotFoundError(DedupError):
    """One or more referenced contacts do not exist."""

    status_code = 404

    def __init__(
        self,
        message: str = "One or both contacts not found",
        resource_ids: Optional[List[int]] = None,
    ):
        if resource_ids:
            message = f"{message}: {', '.join(str(i) for i in resource_ids)}"
        super().__init__(message=message, details={"resource_ids": resource_ids or []})
        self.resource_ids = resource_ids or []


class MergeFailedError(DedupError):
    """
    The merge transaction failed and was rolled back.

    The database is left exactly as it was before the attempt.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Failed to merge contacts",
        keep_id: Optional[int] = None,
        remove_id: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            details={"keep_id": keep_id, "remove_id": remove_id},
        )
        self.keep_id = keep_id
        self.remove_id = remove_id
