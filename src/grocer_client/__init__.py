"""Async client for the grocery storefront REST API."""

import importlib.metadata
import logging

from grocer_client.client import SessionClient, create_client
from grocer_client.config import FrozenConfig, ResolvedConfig, resolve_config
from grocer_client.core.exceptions import (
    BusinessError,
    ConfigurationError,
    GrocerClientError,
    InvariantViolationError,
    RenewalInterruptedError,
    RequestError,
    SessionExpiredError,
    TransportError,
)
from grocer_client.core.types import (
    Failure,
    FailureKind,
    RequestDescriptor,
    Result,
    Success,
)
from grocer_client.envelope import EnvelopeNormalizer
from grocer_client.session import (
    LoggingNavigator,
    Navigator,
    RenewalCoordinator,
    RenewalState,
)
from grocer_client.telemetry import (
    InMemoryReporter,
    TelemetryContext,
    TelemetryReporter,
)
from grocer_client.transport import HttpTransport, Transport

# Version handling
try:
    __version__ = importlib.metadata.version("grocer-client")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Client
    "SessionClient",
    "create_client",
    # Configuration
    "resolve_config",
    "ResolvedConfig",
    "FrozenConfig",
    # Core Types
    "RequestDescriptor",
    "Result",
    "Success",
    "Failure",
    "FailureKind",
    # Building blocks
    "EnvelopeNormalizer",
    "RenewalCoordinator",
    "RenewalState",
    "Navigator",
    "LoggingNavigator",
    "Transport",
    "HttpTransport",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    "InMemoryReporter",
    # Exceptions
    "GrocerClientError",
    "ConfigurationError",
    "InvariantViolationError",
    "RenewalInterruptedError",
    "RequestError",
    "TransportError",
    "BusinessError",
    "SessionExpiredError",
]
