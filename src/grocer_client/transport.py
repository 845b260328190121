"""HTTP transport for the storefront backend.

The transport only moves bytes: it sends a `RequestDescriptor` and returns the
``httpx.Response`` whatever its status. Network problems surface as
``httpx.HTTPError`` and are normalized by the client.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

import httpx

from grocer_client.constants import DEFAULT_BASE_URL, DEFAULT_HEADERS, NETWORK_TIMEOUT

if TYPE_CHECKING:
    from grocer_client.core.types import RequestDescriptor

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """What the client needs from an HTTP layer."""

    async def send(self, request: RequestDescriptor) -> httpx.Response: ...  # noqa: D102

    def reset(self) -> None: ...  # noqa: D102

    async def aclose(self) -> None: ...  # noqa: D102


class HttpTransport:
    """`Transport` backed by a shared ``httpx.AsyncClient``.

    The client keeps a cookie jar so the backend's HTTP-only session cookie
    rides along on every call, including the refresh call.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = NETWORK_TIMEOUT,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        mock: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the transport.

        Args:
            base_url: Root URL every descriptor path is resolved against.
            timeout: Per-request timeout in seconds.
            headers: Default headers; JSON content type when omitted.
            client: Pre-built ``httpx.AsyncClient`` to use instead of creating one.
            mock: Optional ``httpx`` transport (e.g. ``httpx.MockTransport``) for tests.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers if headers is not None else dict(DEFAULT_HEADERS),
            timeout=timeout,
            transport=mock,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    async def send(self, request: RequestDescriptor) -> httpx.Response:
        logger.debug("-> %s %s", request.method, request.url)
        response = await self._client.request(
            request.method,
            request.url,
            json=request.data,
            params=dict(request.params) if request.params else None,
            headers=dict(request.headers) if request.headers else None,
        )
        logger.debug(
            "<- %s %s %d", request.method, request.url, response.status_code
        )
        return response

    def reset(self) -> None:
        """Forget session cookies after a forced logout."""
        self._client.cookies.clear()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
