"""Core data types that flow through the client.

This module defines the immutable values exchanged between the transport
adapter, the envelope normalizer and the renewal coordinator: the outbound
`RequestDescriptor` and the `Result` union every call settles into. Errors are
values here; callers branch on `Failure.kind` instead of catching exceptions.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import json
from types import MappingProxyType
import typing

from grocer_client.constants import HTTP_METHODS

if typing.TYPE_CHECKING:
    from grocer_client.core.exceptions import RequestError

# --- Minimal guard helpers ---

T = typing.TypeVar("T")


def _freeze_mapping(
    m: dict[str, T] | typing.Mapping[str, T] | None,
) -> typing.Mapping[str, T] | None:
    """Return an immutable mapping view or None.

    Accepts dict or Mapping; wraps dicts in MappingProxyType while preserving type.
    """
    if m is None or isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m))


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad ---
# Every request settles into exactly one of these. The adapter never lets an
# exception escape for transport or business failures.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


class FailureKind(str, Enum):
    """Why a request failed."""

    BUSINESS = "business"  # envelope code present but not OK
    TRANSPORT = "transport"  # network failure or non-envelope HTTP error
    SESSION_EXPIRED = "session_expired"  # reserved code, triggers renewal


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful result carrying the unwrapped payload."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed result, containing the error."""

    error: TFailure

    @property
    def kind(self) -> FailureKind:
        """Failure category taken from the carried error."""
        return typing.cast("RequestError", self.error).kind

    @property
    def detail(self) -> dict[str, typing.Any]:
        """Plain mapping of the carried error's fields for display or logging."""
        to_detail = getattr(self.error, "to_detail", None)
        if callable(to_detail):
            return typing.cast("dict[str, typing.Any]", to_detail())
        return {"message": str(self.error)}


Result = Success[TSuccess] | Failure[TFailure]


def is_session_expired(result: Result[typing.Any, typing.Any]) -> bool:
    """Return True when the result is the reserved session-expired failure."""
    return (
        isinstance(result, Failure)
        and getattr(result.error, "kind", None) is FailureKind.SESSION_EXPIRED
    )


# --- Outbound request ---


@dataclasses.dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Immutable description of one outbound call.

    `url` is resolved against the client's base URL. The only field that ever
    differs between an original call and its replay is `retried`, which is set
    once the call has been re-issued after a session renewal.
    ``data`` is sent as the JSON body and must be JSON-serializable.
    """

    url: str
    method: str = "GET"
    data: typing.Any = None
    params: typing.Mapping[str, typing.Any] | None = None
    headers: typing.Mapping[str, str] | None = None
    retried: bool = False

    def __post_init__(self) -> None:
        """Validate invariants and freeze mapping fields."""
        _require(
            condition=isinstance(self.url, str),
            message="must be str",
            field_name="url",
            exc=TypeError,
        )
        _require(
            condition=self.url.strip() != "",
            message="cannot be empty string",
            field_name="url",
        )
        _require(
            condition=isinstance(self.method, str),
            message="must be str",
            field_name="method",
            exc=TypeError,
        )
        method = self.method.upper()
        _require(
            condition=method in HTTP_METHODS,
            message=f"must be one of {sorted(HTTP_METHODS)}, got {self.method!r}",
            field_name="method",
        )
        _require(
            condition=isinstance(self.retried, bool),
            message="must be bool",
            field_name="retried",
            exc=TypeError,
        )
        if self.data is not None:
            try:
                json.dumps(self.data, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise TypeError(f"data: must be JSON-serializable ({e})") from e
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "params", _freeze_mapping(self.params))
        object.__setattr__(self, "headers", _freeze_mapping(self.headers))

    def mark_retried(self) -> RequestDescriptor:
        """Return a copy flagged as already replayed after a renewal."""
        if self.retried:
            return self
        return dataclasses.replace(self, retried=True)
