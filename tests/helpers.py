"""Shared test doubles: an in-memory storefront backend and small async helpers."""

import asyncio
from collections.abc import Callable
import dataclasses
from typing import Any

import httpx

from grocer_client.config import FrozenConfig
from grocer_client.constants import OK_CODE, SESSION_EXPIRED_CODE

BASE_URL = "http://shop.test/api"


def make_config(**overrides: Any) -> FrozenConfig:
    base = FrozenConfig(
        base_url=BASE_URL,
        timeout_seconds=5.0,
        ok_code=OK_CODE,
        session_expired_code=SESSION_EXPIRED_CODE,
        refresh_path="/auth/refresh",
        logout_path="/auth/logout",
        login_path="/login",
        renewal_timeout_seconds=None,
    )
    return dataclasses.replace(base, **overrides)


def envelope(
    code: int, result: Any = None, message: str = "", *, status: int = 200
) -> httpx.Response:
    return httpx.Response(
        status, json={"code": code, "message": message, "result": result}
    )


async def wait_until(predicate: Callable[[], bool], *, attempts: int = 2000) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached while yielding to the event loop")


class FakeStorefront:
    """Backend double speaking the ``{code, message, result}`` envelope.

    Every business path answers with the session-expired code until a refresh
    call succeeds. The refresh call blocks on ``refresh_gate`` so tests can park
    several requests behind one renewal; the logout call blocks on
    ``logout_gate``.
    """

    def __init__(self, payloads: dict[str, Any] | None = None):
        self.payloads = payloads or {}
        self.session_valid = False
        self.refresh_gate = asyncio.Event()
        self.refresh_gate.set()
        self.logout_gate = asyncio.Event()
        self.logout_gate.set()
        self.refresh_response: Callable[[], httpx.Response] = lambda: envelope(
            OK_CODE, message="renewed"
        )
        self.logout_response: Callable[[], httpx.Response] = lambda: envelope(OK_CODE)
        self.always_expired: set[str] = set()
        self.log: list[tuple[str, str]] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, path: str) -> int:
        return sum(1 for _, p in self.log if p == path)

    def business_calls(self) -> list[str]:
        return [p for _, p in self.log if not p.startswith("/auth/")]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        self.log.append((request.method, path))

        if path == "/auth/refresh":
            await self.refresh_gate.wait()
            response = self.refresh_response()
            if response.status_code < 400 and response.json().get("code") == OK_CODE:
                self.session_valid = True
            return response
        if path == "/auth/logout":
            await self.logout_gate.wait()
            self.session_valid = False
            return self.logout_response()

        if not self.session_valid or path in self.always_expired:
            return envelope(
                SESSION_EXPIRED_CODE, message="Access token expired", status=401
            )
        if path not in self.payloads:
            return envelope(4004, message=f"{path} not found", status=404)
        return envelope(OK_CODE, result=self.payloads[path])
