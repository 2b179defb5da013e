"""Error taxonomy for queue operations."""

from typing import Optional

from queuehub.constants import MSG_NOT_REGISTERED


class QueueError(Exception):
    """Base class for every error queuehub reports."""


class ConfigurationError(QueueError):
    """Raised when construction input is missing, malformed or names an unknown store."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        self.errors = errors or []
        if self.errors:
            message = message + ":\n" + "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(message)


class ValidationError(QueueError):
    """A per-call request failed the field checks."""


class RegistrationError(QueueError):
    """The identifier is not registered for the addressed store."""

    def __init__(self, store: str, identifier: str):
        self.store = store
        self.identifier = identifier
        super().__init__(MSG_NOT_REGISTERED.format(store=store, identifier=identifier))


class BackendError(QueueError):
    """
    A store driver failed.

    The driver's message is kept verbatim; the driver exception itself is
    chained as __cause__.
    """

    def __init__(self, store: str, operation: str, message: str):
        self.store = store
        self.operation = operation
        super().__init__(message)


__all__ = [
    "QueueError",
    "ConfigurationError",
    "ValidationError",
    "RegistrationError",
    "BackendError",
]
