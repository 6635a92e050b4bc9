import asyncio

import pytest

from ask_human.errors import CancellationError, MismatchError, NothingPendingError
from ask_human.ipc.broker import BrokerState, Resolver
from ask_human.ipc.protocol import IpcRequest


def _request(request_id: str) -> IpcRequest:
    return IpcRequest(id=request_id, message="Continue?", is_markdown=False)


@pytest.mark.asyncio
async def test_resolve_fulfils_pending_resolver() -> None:
    state = BrokerState()
    resolver = Resolver()
    await state.set_pending(_request("r1"), resolver)

    await state.resolve("r1", "Yes")

    assert await resolver.wait() == "Yes"
    assert state.pending_request is None


@pytest.mark.asyncio
async def test_resolve_with_nothing_pending_fails() -> None:
    state = BrokerState()
    with pytest.raises(NothingPendingError):
        await state.resolve("r1", "Yes")


@pytest.mark.asyncio
async def test_mismatched_resolve_keeps_pending_request() -> None:
    state = BrokerState()
    resolver = Resolver()
    await state.set_pending(_request("r1"), resolver)

    with pytest.raises(MismatchError) as exc:
        await state.resolve("other", "Yes")
    assert exc.value.expected_id == "r1"
    assert exc.value.request_id == "other"
    assert not resolver.done
    assert state.pending_request == _request("r1")

    # Still resolvable by its own id
    await state.resolve("r1", "No")
    assert await resolver.wait() == "No"


@pytest.mark.asyncio
async def test_second_set_pending_drops_first_resolver() -> None:
    state = BrokerState()
    first = Resolver()
    second = Resolver()
    await state.set_pending(_request("r1"), first)
    await state.set_pending(_request("r2"), second)

    with pytest.raises(CancellationError):
        await first.wait()
    assert state.pending_request == _request("r2")

    with pytest.raises(MismatchError):
        await state.resolve("r1", "late")
    await state.resolve("r2", "ok")
    assert await second.wait() == "ok"


@pytest.mark.asyncio
async def test_resolver_is_write_once() -> None:
    resolver = Resolver()
    assert resolver.fulfill("first")
    assert not resolver.fulfill("second")
    resolver.drop()
    assert await resolver.wait() == "first"


@pytest.mark.asyncio
async def test_waiter_suspends_until_fulfilled() -> None:
    resolver = Resolver()
    waiter = asyncio.create_task(resolver.wait())
    await asyncio.sleep(0.05)
    assert not waiter.done()

    resolver.fulfill("done")
    assert await waiter == "done"


@pytest.mark.asyncio
async def test_drop_pending_cancels_waiter() -> None:
    state = BrokerState()
    resolver = Resolver()
    await state.set_pending(_request("r1"), resolver)

    await state.drop_pending()

    assert state.pending_request is None
    with pytest.raises(CancellationError):
        await resolver.wait()


@pytest.mark.asyncio
async def test_instances_do_not_share_state() -> None:
    one = BrokerState()
    two = BrokerState()
    await one.set_pending(_request("r1"), Resolver())

    assert two.pending_request is None
    assert one.notify_channel() is not two.notify_channel()
