"""
Error types and Service Bus error handling.

The catalog core never raises for bad data; these errors belong to the
layers around it (storage reader, transport, application service).
"""

from collections.abc import Generator
from contextlib import contextmanager

from azure.servicebus.exceptions import (
    MessagingEntityNotFoundError,
    ServiceBusAuthenticationError,
    ServiceBusConnectionError,
    ServiceBusError,
)

from common.logging import get_logger

logger = get_logger(__name__)


class EntityNotFoundError(LookupError):
    """A name or address does not match any entity in the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Entity not found: {name}")


class EntityStoreError(RuntimeError):
    """Reading the emulator's entity lookup table failed."""


class TransportError(RuntimeError):
    """A Service Bus send/receive/peek/dead-letter call failed."""


def format_service_bus_error(error: ServiceBusError) -> str:
    """Turn a Service Bus SDK exception into a short, readable message."""
    if isinstance(error, MessagingEntityNotFoundError):
        return f"Entity unknown to the broker: {error.message}"
    if isinstance(error, ServiceBusAuthenticationError):
        return f"Authentication failed: {error.message}"
    if isinstance(error, ServiceBusConnectionError):
        return f"Could not connect to Service Bus: {error.message}"
    return f"{type(error).__name__}: {error.message}"


@contextmanager
def handle_service_bus_errors(operation_name: str) -> Generator[None, None, None]:
    """
    Context manager for handling Service Bus errors consistently.

    Catches Service Bus SDK exceptions, logs them and re-raises as
    TransportError with a formatted message.

    Args:
        operation_name: Name of the operation (e.g., "Peek", "Send")
            Used in log messages for context.

    Usage:
        with handle_service_bus_errors("Peek"):
            messages = await receiver.peek_messages(max_message_count=10)

    Raises:
        TransportError: If a Service Bus exception occurs.
        Exception: Re-raises any other exceptions after logging.
    """
    try:
        yield
    except ServiceBusError as e:
        error_msg = format_service_bus_error(e)
        logger.error(f"[{operation_name}] Service Bus error: {error_msg}")
        raise TransportError(error_msg) from e
    except Exception as e:
        logger.error(f"[{operation_name}] Failed: {type(e).__name__}: {e!r}")
        raise
