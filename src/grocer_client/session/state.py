"""Renewal state owned by a single client instance."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from grocer_client.core.exceptions import InvariantViolationError
from grocer_client.session.queue import PendingQueue


@dataclass(slots=True)
class RenewalState:
    """Whether a renewal is in flight, and who is waiting on it.

    Only the renewal coordinator mutates this. The queue may hold entries only
    while ``renewing`` is true. ``episode`` is the coordinator-owned task that
    runs the current renewal and its replays; it outlives ``renewing``, which
    drops as soon as the refresh call settles.
    """

    renewing: bool = False
    queue: PendingQueue = field(default_factory=PendingQueue)
    episode: asyncio.Task[None] | None = None

    @property
    def idle(self) -> bool:
        return not self.renewing and len(self.queue) == 0

    def assert_consistent(self) -> None:
        """Raise if waiters are parked while no renewal is in flight."""
        if not self.renewing and len(self.queue):
            raise InvariantViolationError(
                f"{len(self.queue)} pending request(s) queued while not renewing",
                state=self,
            )
