"""The user-facing entry point for issuing backend calls.

`SessionClient.execute` is the only call the rest of an application needs:

    execute = route_expiry(normalize(transport.send(request)))

Every outcome comes back as a `Success` or `Failure` value. Session expiry is
handled inside, by the `RenewalCoordinator` the client owns; callers never see
the queue or the renewal state machine.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any, Self

import httpx

from grocer_client.config import FrozenConfig, resolve_config
from grocer_client.core.types import RequestDescriptor, Result, is_session_expired
from grocer_client.envelope import EnvelopeNormalizer, normalize_exception
from grocer_client.session.navigation import LoggingNavigator
from grocer_client.session.renewal import RenewalCoordinator
from grocer_client.session.state import RenewalState
from grocer_client.telemetry import TelemetryContext
from grocer_client.transport import HttpTransport

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from grocer_client.core.exceptions import RequestError
    from grocer_client.session.navigation import Navigator
    from grocer_client.telemetry import TelemetryReporter
    from grocer_client.transport import Transport

logger = logging.getLogger(__name__)

T_EXECUTE = "client.execute"


class SessionClient:
    """Issues requests against the storefront API with transparent session renewal.

    Each instance owns its own `RenewalState`, so independent clients (or
    tests) never share a renewal episode.
    """

    def __init__(
        self,
        config: FrozenConfig,
        transport: Transport | None = None,
        *,
        navigator: Navigator | None = None,
        reporters: Iterable[TelemetryReporter] = (),
        validate: bool | None = None,
    ):
        """Initialize the client.

        Args:
            config: Resolved, frozen client configuration.
            transport: HTTP layer; an `HttpTransport` on ``config.base_url``
                when omitted.
            navigator: Receives the login redirect after a failed renewal.
            reporters: Telemetry reporters (active only when telemetry is enabled).
            validate: Check renewal-state invariants after every episode
                (overrides GROCER_CLIENT_VALIDATE).
        """
        self.config = config
        self._transport: Transport = transport or HttpTransport(
            config.base_url, timeout=config.timeout_seconds
        )
        self._navigator: Navigator = navigator or LoggingNavigator()
        self._normalizer = EnvelopeNormalizer(
            ok_code=config.ok_code,
            session_expired_code=config.session_expired_code,
        )
        self._ctx = TelemetryContext(*reporters)
        self._state = RenewalState()
        self._coordinator = RenewalCoordinator(
            self._dispatch,
            state=self._state,
            refresh_path=config.refresh_path,
            logout_path=config.logout_path,
            login_path=config.login_path,
            navigate=self._hard_redirect,
            renewal_timeout=config.renewal_timeout_seconds,
            telemetry=self._ctx,
            validate=validate,
        )

    @property
    def renewal_state(self) -> RenewalState:
        """The client's renewal state. Read it; never mutate it."""
        return self._state

    async def execute(self, request: RequestDescriptor) -> Result[Any, RequestError]:
        """Send ``request`` and return its normalized result.

        A session-expired failure is routed through the renewal coordinator;
        every other result is returned as is.
        """
        with self._ctx(T_EXECUTE, method=request.method):
            result = await self._dispatch(request)
        # Session counters are recorded outside the execute scope.
        if is_session_expired(result):
            return await self._coordinator.handle_expired(request, result)  # type: ignore[arg-type]
        return result

    async def request(
        self,
        url: str,
        method: str = "GET",
        *,
        data: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any, RequestError]:
        """Build a `RequestDescriptor` and execute it."""
        return await self.execute(
            RequestDescriptor(url, method, data=data, params=params, headers=headers)
        )

    async def get(
        self, url: str, *, params: Mapping[str, Any] | None = None
    ) -> Result[Any, RequestError]:
        return await self.request(url, "GET", params=params)

    async def post(self, url: str, data: Any = None) -> Result[Any, RequestError]:
        return await self.request(url, "POST", data=data)

    async def put(self, url: str, data: Any = None) -> Result[Any, RequestError]:
        return await self.request(url, "PUT", data=data)

    async def patch(self, url: str, data: Any = None) -> Result[Any, RequestError]:
        return await self.request(url, "PATCH", data=data)

    async def delete(self, url: str) -> Result[Any, RequestError]:
        return await self.request(url, "DELETE")

    async def _dispatch(self, request: RequestDescriptor) -> Result[Any, RequestError]:
        """Transport call plus normalization, with no expiry handling."""
        try:
            response = await self._transport.send(request)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return normalize_exception(exc)
        return self._normalizer.normalize(response)

    def _hard_redirect(self, location: str) -> None:
        """Discard the client-side session, then navigate to ``location``."""
        self._transport.reset()
        self._navigator.redirect(location)

    async def aclose(self) -> None:
        """Cancel any in-flight renewal, then close the transport."""
        await self._coordinator.aclose()
        await self._transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_client(
    config: FrozenConfig | None = None,
    *,
    transport: Transport | None = None,
    navigator: Navigator | None = None,
    reporters: Iterable[TelemetryReporter] = (),
    validate: bool | None = None,
) -> SessionClient:
    """Create a client with optional configuration.

    If no configuration is provided, it is resolved from the environment
    (``GROCER_*`` variables) and defaults.
    """
    # This is the only place where ambient configuration is resolved.
    final_config = config if config is not None else resolve_config().to_frozen()
    logger.debug("Creating SessionClient for %s", final_config.base_url)
    return SessionClient(
        final_config,
        transport,
        navigator=navigator,
        reporters=reporters,
        validate=validate,
    )
