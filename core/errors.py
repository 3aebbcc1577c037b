"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Failure taxonomy shared by the pure calculators and the store workflows.

`main.py` turns each class into an HTTP response using `status_code`.
"""

from __future__ import annotations


class NutritionError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class Unauthorized(NutritionError):
    """No resolved user for this request."""

    status_code = 401
    code = "unauthorized"


class InsufficientData(NutritionError):
    """Biometric inputs are missing or out of range."""

    status_code = 422
    code = "insufficient_data"


class InvalidGoal(NutritionError):
    """Unrecognised goal type."""

    status_code = 422
    code = "invalid_goal"


class NotFound(NutritionError):
    """Requested row does not exist for this user."""

    status_code = 404
    code = "not_found"


class AlreadyExists(NutritionError):
    """A row with the same unique key exists."""

    status_code = 409
    code = "already_exists"


class ConflictRetryExhausted(NutritionError):
    """A concurrent write won twice in a row."""

    status_code = 409
    code = "conflict_retry_exhausted"


class StoreUnavailable(NutritionError):
    """The backing store failed or timed out."""

    status_code = 503
    code = "store_unavailable"
