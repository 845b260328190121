import asyncio

import pytest

from grocer_client.core.exceptions import InvariantViolationError
from grocer_client.core.types import RequestDescriptor, Success
from grocer_client.session.queue import PendingQueue
from grocer_client.session.state import RenewalState


@pytest.mark.unit
@pytest.mark.asyncio
async def test_drain_returns_entries_in_arrival_order_and_empties_queue() -> None:
    queue = PendingQueue()
    for path in ("/a", "/b", "/c"):
        queue.enqueue(RequestDescriptor(path))

    drained = queue.drain()

    assert [e.request.url for e in drained] == ["/a", "/b", "/c"]
    assert len(queue) == 0
    assert queue.drain() == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_resolve_wakes_the_waiter() -> None:
    queue = PendingQueue()
    entry = queue.enqueue(RequestDescriptor("/cart"))
    waiter = asyncio.create_task(entry.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    entry.resolve(Success({"items": []}))

    assert await waiter == Success({"items": []})
    assert entry.settled


@pytest.mark.unit
@pytest.mark.asyncio
async def test_reject_raises_in_the_waiter() -> None:
    entry = PendingQueue().enqueue(RequestDescriptor("/cart"))

    entry.reject(RuntimeError("renewal crashed"))

    with pytest.raises(RuntimeError, match="renewal crashed"):
        await entry.wait()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_settling_twice_is_an_invariant_violation() -> None:
    entry = PendingQueue().enqueue(RequestDescriptor("/cart"))
    entry.resolve(Success(1))

    with pytest.raises(InvariantViolationError, match="settled twice"):
        entry.resolve(Success(2))
    assert await entry.wait() == Success(1)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cancelled_waiter_is_skipped_silently() -> None:
    entry = PendingQueue().enqueue(RequestDescriptor("/cart"))
    waiter = asyncio.create_task(entry.wait())
    await asyncio.sleep(0)

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    assert entry.cancelled
    entry.resolve(Success("late"))  # no error, nobody to deliver to


@pytest.mark.unit
@pytest.mark.asyncio
async def test_renewal_state_consistency_check() -> None:
    state = RenewalState()
    assert state.idle
    state.assert_consistent()

    state.renewing = True
    state.queue.enqueue(RequestDescriptor("/orders"))
    state.assert_consistent()
    assert not state.idle

    state.renewing = False
    with pytest.raises(InvariantViolationError, match="queued while not renewing"):
        state.assert_consistent()
