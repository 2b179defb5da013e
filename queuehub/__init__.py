"""
queuehub - one queue API over several key-value stores.

This package registers the identifiers (queue names) a service may use on
each configured store, then fans every queue operation out to those stores
and folds the per-store results into a single outcome.

Usage:
    from queuehub import QueueHandler

    handler = await QueueHandler.create({
        "redis": {
            "queueConnector": {"host": "localhost", "port": 6379},
            "serviceName": "notifier",
            "identifierSet": ["orders"],
        }
    })
    await handler.push({"identifier": "orders", "key": "o1", "value": {"targetType": ["email"]}})
    outcome = await handler.read({"identifier": "orders", "key": "o1"})

    # Config
    from queuehub.config import get_settings, Settings

    # Logging
    from queuehub.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

from queuehub.exceptions import (
    BackendError,
    ConfigurationError,
    QueueError,
    RegistrationError,
    ValidationError,
)
from queuehub.handler import QueueHandler
from queuehub.models import DispatchOutcome, QueueRequest, RegistrationEntry

__all__ = [
    "QueueHandler",
    "DispatchOutcome",
    "QueueRequest",
    "RegistrationEntry",
    "QueueError",
    "ConfigurationError",
    "ValidationError",
    "RegistrationError",
    "BackendError",
]
