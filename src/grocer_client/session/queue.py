"""Pending-request queue.

Callers that observe an expired session while a renewal is already in flight
park here. Each entry wraps an ``asyncio.Future``; the coordinator settles it
exactly once, either with the replayed `Result` or with the renewal failure.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from grocer_client.core.exceptions import InvariantViolationError
from grocer_client.core.types import RequestDescriptor, Result


def _new_future() -> asyncio.Future[Result[Any, Exception]]:
    return asyncio.get_running_loop().create_future()


@dataclass(eq=False, slots=True)
class PendingEntry:
    """One suspended caller and the request it will have replayed."""

    request: RequestDescriptor
    _future: asyncio.Future[Result[Any, Exception]] = field(
        default_factory=_new_future, repr=False
    )

    @property
    def cancelled(self) -> bool:
        """True when the waiting caller gave up before being settled."""
        return self._future.cancelled()

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, result: Result[Any, Exception]) -> None:
        """Deliver a result to the waiting caller."""
        if self._check_open():
            self._future.set_result(result)

    def reject(self, exc: BaseException) -> None:
        """Raise ``exc`` in the waiting caller."""
        if self._check_open():
            self._future.set_exception(exc)

    async def wait(self) -> Result[Any, Exception]:
        """Suspend until the coordinator settles this entry."""
        return await self._future

    def _check_open(self) -> bool:
        if self._future.cancelled():
            return False
        if self._future.done():
            raise InvariantViolationError(
                f"Pending entry for {self.request.method} {self.request.url} "
                "settled twice",
                state=self,
            )
        return True


class PendingQueue:
    """FIFO of callers waiting on the in-flight renewal."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: deque[PendingEntry] = deque()

    def enqueue(self, request: RequestDescriptor) -> PendingEntry:
        entry = PendingEntry(request)
        self._entries.append(entry)
        return entry

    def drain(self) -> list[PendingEntry]:
        """Remove and return every entry in arrival order."""
        entries = list(self._entries)
        self._entries.clear()
        return entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PendingEntry]:
        return iter(tuple(self._entries))
