"""Exception taxonomy for the storefront client.

Request failures are not raised across the client boundary; they travel inside
`Failure` values so UI code can branch on `kind`. The classes below still
derive from `Exception` so they can be logged, chained and re-raised by callers
that prefer exceptions (`raise failure.error`).
"""

from __future__ import annotations

from typing import Any

from grocer_client.core.types import FailureKind


class GrocerClientError(Exception):
    """Base exception for all client errors."""


class ConfigurationError(GrocerClientError):
    """Raised when client configuration is missing or invalid."""


class InvariantViolationError(GrocerClientError):
    """Raised when internal session state breaks a documented invariant."""

    def __init__(self, message: str, *, state: Any = None):
        super().__init__(message)
        self.state = state


class RequestError(GrocerClientError):
    """Base for errors carried inside a `Failure` result."""

    kind: FailureKind = FailureKind.TRANSPORT

    def to_detail(self) -> dict[str, Any]:
        return {"message": str(self)}


class TransportError(RequestError):
    """Network failure, or an HTTP error whose body is not an envelope."""

    kind = FailureKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.data = data

    def to_detail(self) -> dict[str, Any]:
        return {"message": str(self), "status": self.status_code, "data": self.data}


class RenewalInterruptedError(TransportError):
    """The renewal episode ended without a renewal outcome.

    Carried in the `Failure` handed to every caller of the episode when the
    refresh call raised instead of returning a result, or when the episode was
    cancelled by `SessionClient.aclose`.
    """


class BusinessError(RequestError):
    """Envelope returned with a code other than the success code."""

    kind = FailureKind.BUSINESS

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"Request failed with code {code}")
        self.code = code
        self.message = message

    def to_detail(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class SessionExpiredError(BusinessError):
    """Reserved business error signalling the access credential expired."""

    kind = FailureKind.SESSION_EXPIRED

    def degrade(self) -> BusinessError:
        """Plain business error used once a replayed call expires again."""
        degraded = BusinessError(self.code, self.message)
        degraded.__cause__ = self
        return degraded
