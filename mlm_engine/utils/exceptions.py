"""
Exception handling utilities.

Defines the error taxonomy of the commission engine and categorized
exception types for proper error handling.
"""

from sqlalchemy.exc import DBAPIError, OperationalError


class MLMError(Exception):
    """Base class for commission engine errors."""
    pass


class NotFoundError(MLMError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class UserNotFoundError(NotFoundError):
    """Raised when a user identifier resolves to nobody."""

    def __init__(self, identifier: object) -> None:
        super().__init__("User", identifier)


class CommissionNotFoundError(NotFoundError):
    """Raised when a commission ledger entry does not exist."""

    def __init__(self, identifier: object) -> None:
        super().__init__("Commission", identifier)


class ValidationError(MLMError):
    """Raised when input is rejected before any write."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class InvalidCommissionStatusError(ValidationError):
    """Raised for a status outside pending/approved/paid/void."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            "status",
            f"Invalid status value {value!r}. "
            "Allowed: pending, approved, paid, void",
        )


class SettingsValidationError(ValidationError):
    """Raised when a settings payload is malformed."""
    pass


class ReferralAttributionError(MLMError):
    """Raised when a referrer cannot be attached to a user."""
    pass


# Exception categories based on handling strategy

# Must log but can continue - store hiccups the caller may retry
MUST_LOG = (
    OperationalError,  # Connection drops, timeouts
    DBAPIError,        # Driver level failures
)


def is_transient_store_error(exc: BaseException) -> bool:
    """
    Check if exception is a store failure worth retrying.

    Args:
        exc: Exception to check

    Returns:
        True if exception is a connection or driver failure
    """
    return isinstance(exc, MUST_LOG)

