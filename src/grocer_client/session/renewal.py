"""Single-flight session renewal.

When a request fails because the short-lived access credential expired, the
coordinator renews the session once, no matter how many requests hit the
expiry in the same window, and then replays every affected request.

States:

- idle: the first expired request flips ``renewing`` on, issues the refresh
  call and waits for it. Later expired requests are parked in the queue.
- renewing: expired requests only enqueue; no second refresh call is made.

The episode (refresh call, then replays or logout plus redirect) runs in a
task owned by the coordinator. The trigger waits on a pending entry just like
the queued callers, so cancelling any caller, the trigger included, only
withdraws that caller.

When the refresh call settles, the queue is drained and ``renewing`` flips
off in the same step. On success the trigger and every waiter are replayed,
trigger first, then in arrival order, each replay in its own task. On failure
every caller receives the same failure, the server session is terminated
best-effort and the user is sent to the login page once.

A request that was already replayed and expires again is returned as a plain
business error; it never starts another renewal.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import functools
import logging
from typing import Any

from grocer_client._dev_flags import dev_validate_enabled
from grocer_client.constants import LOGIN_PATH, LOGOUT_PATH, REFRESH_PATH
from grocer_client.core.exceptions import (
    RenewalInterruptedError,
    RequestError,
    SessionExpiredError,
    TransportError,
)
from grocer_client.core.types import (
    Failure,
    RequestDescriptor,
    Result,
    Success,
    is_session_expired,
)
from grocer_client.session.navigation import LoggingNavigator
from grocer_client.session.queue import PendingEntry
from grocer_client.session.state import RenewalState
from grocer_client.telemetry import TelemetryContext, TelemetryContextProtocol

logger = logging.getLogger(__name__)

type Dispatch = Callable[[RequestDescriptor], Awaitable[Result[Any, RequestError]]]

# --- Telemetry scopes/keys ---
T_RENEWAL = "session.renewal"
T_RENEWAL_STARTED = "session.renewal.started"
T_RENEWAL_QUEUED = "session.renewal.queued"
T_RENEWAL_SUCCEEDED = "session.renewal.succeeded"
T_RENEWAL_FAILED = "session.renewal.failed"
T_REPLAY = "session.replay"
T_LOGOUT = "session.logout"


class RenewalCoordinator:
    """Drives renewal episodes for one client.

    ``dispatch`` sends a request and normalizes the response without any
    expiry handling; the coordinator uses it for the refresh call, the logout
    call and every replay.
    """

    def __init__(
        self,
        dispatch: Dispatch,
        *,
        state: RenewalState | None = None,
        refresh_path: str = REFRESH_PATH,
        logout_path: str = LOGOUT_PATH,
        login_path: str = LOGIN_PATH,
        navigate: Callable[[str], None] | None = None,
        renewal_timeout: float | None = None,
        telemetry: TelemetryContextProtocol | None = None,
        validate: bool | None = None,
    ):
        if renewal_timeout is not None and renewal_timeout <= 0:
            raise ValueError("renewal_timeout must be positive when set")
        self._dispatch = dispatch
        self.state = state if state is not None else RenewalState()
        # Session endpoints are sent pre-flagged so they can never re-enter renewal.
        self._refresh_request = RequestDescriptor(refresh_path, "POST", retried=True)
        self._logout_request = RequestDescriptor(logout_path, "POST", retried=True)
        self.login_path = login_path
        self._navigate = navigate or LoggingNavigator().redirect
        self.renewal_timeout = renewal_timeout
        self._ctx = telemetry if telemetry is not None else TelemetryContext()
        self._validate = dev_validate_enabled(override=validate)

    async def handle_expired(
        self,
        request: RequestDescriptor,
        failure: Failure[Any],
    ) -> Result[Any, RequestError]:
        """Route a session-expired failure for ``request``.

        Returns the result the original caller should see: its replayed
        result after a successful renewal, the renewal failure otherwise, or a
        degraded business error when ``request`` was already replayed once.
        """
        if request.retried:
            logger.debug(
                "Session expired again on replayed %s %s; not renewing",
                request.method,
                request.url,
            )
            return _degrade(failure)

        # No await between the check and the flip: one renewal per episode.
        if self.state.renewing:
            entry = self.state.queue.enqueue(request.mark_retried())
            self._ctx.count(T_RENEWAL_QUEUED)
            logger.debug(
                "Renewal in flight; queued %s %s (%d waiting)",
                request.method,
                request.url,
                len(self.state.queue),
            )
            return await entry.wait()

        trigger = PendingEntry(request.mark_retried())
        self.state.renewing = True
        episode = asyncio.create_task(
            self._run_episode(trigger), name=f"session-renewal:{request.url}"
        )
        self.state.episode = episode
        episode.add_done_callback(functools.partial(self._episode_done, trigger))
        return await trigger.wait()

    async def aclose(self) -> None:
        """Cancel the in-flight episode; its callers receive a `Failure`."""
        episode = self.state.episode
        if episode is not None and not episode.done():
            episode.cancel()
            await asyncio.wait([episode])

    async def _run_episode(self, trigger: PendingEntry) -> None:
        self._ctx.count(T_RENEWAL_STARTED)
        logger.info(
            "Session expired on %s %s; renewing",
            trigger.request.method,
            trigger.request.url,
        )
        try:
            with self._ctx(T_RENEWAL):
                outcome = await self._call_refresh()
        except asyncio.CancelledError:
            self._abort(trigger)
            raise
        except Exception as exc:
            logger.error("Session renewal call raised: %s", exc, exc_info=True)
            interrupted = RenewalInterruptedError(f"Session renewal failed: {exc}")
            interrupted.__cause__ = exc
            outcome = Failure(interrupted)

        if isinstance(outcome, Success):
            await self._on_renewed(trigger)
        else:
            await self._on_renewal_failed(trigger, outcome)

    async def _call_refresh(self) -> Result[Any, RequestError]:
        if self.renewal_timeout is None:
            return await self._dispatch(self._refresh_request)
        try:
            async with asyncio.timeout(self.renewal_timeout):
                return await self._dispatch(self._refresh_request)
        except TimeoutError:
            return Failure(
                TransportError(
                    f"Session renewal timed out after {self.renewal_timeout}s"
                )
            )

    def _release(self) -> list[PendingEntry]:
        """Drain the queue and leave the renewing state in one step."""
        waiters = self.state.queue.drain()
        self.state.renewing = False
        if self._validate:
            self.state.assert_consistent()
        return waiters

    async def _on_renewed(self, trigger: PendingEntry) -> None:
        entries = [e for e in (trigger, *self._release()) if not e.cancelled]
        self._ctx.count(T_RENEWAL_SUCCEEDED)
        logger.info("Session renewed; replaying %d request(s)", len(entries))

        # Tasks start in creation order: trigger, then FIFO.
        replays = [asyncio.create_task(self._replay_into(e)) for e in entries]
        try:
            await asyncio.gather(*replays)
        except asyncio.CancelledError:
            interrupted = Failure(
                RenewalInterruptedError("Replay cancelled before completion")
            )
            for entry in entries:
                if not entry.settled:
                    entry.resolve(interrupted)
            raise

    async def _on_renewal_failed(
        self, trigger: PendingEntry, outcome: Failure[Any]
    ) -> None:
        waiters = self._release()
        self._ctx.count(T_RENEWAL_FAILED)
        logger.warning(
            "Session renewal failed (%s); ending session for %d caller(s)",
            outcome.error,
            1 + len(waiters),
        )
        for entry in waiters:
            entry.resolve(outcome)

        # The trigger settles last, once the session is gone.
        try:
            await self._terminate_session()
        finally:
            try:
                self._navigate(self.login_path)
            finally:
                trigger.resolve(outcome)

    async def _replay(self, request: RequestDescriptor) -> Result[Any, RequestError]:
        self._ctx.count(T_REPLAY)
        logger.debug("Replaying %s %s", request.method, request.url)
        result = await self._dispatch(request)
        if is_session_expired(result):
            logger.warning(
                "Replayed %s %s still reports an expired session",
                request.method,
                request.url,
            )
            return _degrade(result)  # type: ignore[arg-type]
        return result

    async def _replay_into(self, entry: PendingEntry) -> None:
        try:
            result = await self._replay(entry.request)
        except Exception as exc:
            # Unexpected dispatch errors belong to the waiting caller.
            entry.reject(exc)
        else:
            entry.resolve(result)

    async def _terminate_session(self) -> None:
        """Best-effort server-side logout; failures are logged and ignored."""
        self._ctx.count(T_LOGOUT)
        try:
            result = await self._dispatch(self._logout_request)
        except Exception as exc:
            logger.warning("Logout call raised during forced logout: %s", exc)
            return
        if isinstance(result, Failure):
            logger.warning("Logout call failed during forced logout: %s", result.error)

    def _abort(self, trigger: PendingEntry) -> None:
        entries = [trigger, *self._release()]
        logger.warning(
            "Session renewal cancelled; releasing %d caller(s)", len(entries)
        )
        outcome = Failure(RenewalInterruptedError("Session renewal was cancelled"))
        for entry in entries:
            entry.resolve(outcome)

    def _episode_done(
        self, trigger: PendingEntry, episode: asyncio.Task[None]
    ) -> None:
        if self.state.episode is episode:
            if episode.cancelled() and self.state.renewing:
                # Cancelled before its first step; nobody has been released.
                self._abort(trigger)
            self.state.episode = None
        if not episode.cancelled() and (exc := episode.exception()) is not None:
            logger.error("Session renewal episode crashed", exc_info=exc)


def _degrade(failure: Failure[Any]) -> Failure[Any]:
    """Turn a session-expired failure into an ordinary business failure."""
    if isinstance(failure.error, SessionExpiredError):
        return Failure(failure.error.degrade())
    return failure
