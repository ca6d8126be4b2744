import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from pymongo.errors import (
    ConfigurationError as DriverConfigurationError,
    ConnectionFailure,
    ExecutionTimeout,
    NetworkTimeout,
    OperationFailure,
    PyMongoError,
    ServerSelectionTimeoutError,
    WTimeoutError,
)

logger = logging.getLogger(__name__)

# Server error code for a write that collided with another transaction
WRITE_CONFLICT_CODE = 112


class DemoError(Exception):
    """Base exception for every failure surfaced by docdb_demo."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(DemoError):
    """Invalid client or transaction configuration."""


class DatabaseConnectionError(DemoError):
    """The database service could not be reached."""


class OperationTimeoutError(DemoError):
    """An operation exceeded its server-side or acknowledgement time bound."""


class WriteConflictError(DemoError):
    """A write collided with a concurrent transaction."""


class TransactionAbortError(DemoError):
    """A transaction was aborted or its commit failed."""


class DatabaseOperationError(DemoError):
    """Any other failure reported by the driver."""


def is_write_conflict(error: PyMongoError) -> bool:
    """Whether the driver error is a write conflict or a transient transaction error"""
    if error.has_error_label("TransientTransactionError"):
        return True
    return isinstance(error, OperationFailure) and error.code == WRITE_CONFLICT_CODE


def translate_error(error: PyMongoError, operation: str) -> DemoError:
    """Map a driver exception onto the docdb_demo exception hierarchy"""
    details = {"operation": operation, "driver_error": type(error).__name__}

    if isinstance(error, ServerSelectionTimeoutError):
        return DatabaseConnectionError(f"{operation}: database unreachable: {error}", details)
    if isinstance(error, (NetworkTimeout, ExecutionTimeout, WTimeoutError)):
        return OperationTimeoutError(f"{operation}: timed out: {error}", details)
    if isinstance(error, ConnectionFailure):
        return DatabaseConnectionError(f"{operation}: connection failed: {error}", details)
    if isinstance(error, DriverConfigurationError):
        return ConfigurationError(f"{operation}: invalid connection configuration: {error}", details)
    if is_write_conflict(error):
        return WriteConflictError(f"{operation}: write conflict: {error}", details)
    return DatabaseOperationError(f"{operation} failed: {error}", details)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """
    Re-raise driver exceptions raised in the block as DemoError subclasses.

    Args:
        operation: Name of the operation, used in messages and logs
    """
    try:
        yield
    except PyMongoError as e:
        error = translate_error(e, operation)
        logger.error(f"MongoDB error during {operation}: {e}")
        raise error from e
