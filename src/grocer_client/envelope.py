"""Envelope normalization.

The backend wraps every JSON body in ``{"code", "message", "result"}``. This
module turns a raw ``httpx.Response`` (or the exception raised while trying to
get one) into a `Result`. It is a pure translation: it classifies the
session-expired code but knows nothing about renewal or retries.
"""

from __future__ import annotations

from collections.abc import Mapping
import json
import logging
from typing import Any

import httpx

from grocer_client.constants import OK_CODE, SESSION_EXPIRED_CODE
from grocer_client.core.exceptions import (
    BusinessError,
    RequestError,
    SessionExpiredError,
    TransportError,
)
from grocer_client.core.types import Failure, Result, Success

logger = logging.getLogger(__name__)

_NO_BODY = object()


class EnvelopeNormalizer:
    """Translate backend responses into `Success` / `Failure` values."""

    def __init__(
        self,
        *,
        ok_code: int = OK_CODE,
        session_expired_code: int = SESSION_EXPIRED_CODE,
    ):
        if ok_code == session_expired_code:
            raise ValueError("ok_code and session_expired_code must differ")
        self.ok_code = ok_code
        self.session_expired_code = session_expired_code

    def normalize(self, response: httpx.Response) -> Result[Any, RequestError]:
        """Produce a `Result` from a completed HTTP response."""
        body = _decode_body(response)
        code = _envelope_code(body)

        if code is not None:
            envelope: Mapping[str, Any] = body  # type: ignore[assignment]
            if code == self.ok_code:
                return Success(envelope.get("result"))
            message = envelope.get("message") or ""
            if not isinstance(message, str):
                message = str(message)
            if code == self.session_expired_code:
                return Failure(SessionExpiredError(code, message))
            return Failure(BusinessError(code, message))

        if not response.is_success:
            data = None if body is _NO_BODY else body
            return Failure(
                TransportError(
                    f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                    status_code=response.status_code,
                    data=data,
                )
            )

        # Non-envelope payloads (files, plain text, bare JSON) pass through.
        return Success(None if body is _NO_BODY else body)


def normalize_exception(exc: Exception) -> Failure[TransportError]:
    """Wrap a transport-level exception into a transport `Failure`."""
    status_code: int | None = None
    data: Any = str(exc)
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        body = _decode_body(exc.response)
        if body is not _NO_BODY:
            data = body
    logger.debug("Transport failure: %s: %s", type(exc).__name__, exc)
    error = TransportError(
        str(exc) or type(exc).__name__, status_code=status_code, data=data
    )
    error.__cause__ = exc
    return Failure(error)


def _decode_body(response: httpx.Response) -> Any:
    """Return decoded JSON, raw bytes, or the `_NO_BODY` sentinel."""
    content = response.content
    if not content:
        return _NO_BODY

    content_type = response.headers.get("content-type", "").lower()
    if "json" in content_type or content[:1] in (b"{", b"["):
        try:
            return json.loads(content)
        except ValueError:
            logger.debug("Response declared JSON but did not parse; keeping raw bytes")
    return content


def _envelope_code(body: Any) -> int | None:
    """Return the numeric envelope code, or None when the body is not an envelope."""
    if not isinstance(body, Mapping):
        return None
    code = body.get("code")
    # bool is an int subclass but never a valid code
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return None
