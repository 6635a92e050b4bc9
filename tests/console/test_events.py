import pytest

from ask_human.console.events import RequestEventBus


@pytest.mark.asyncio
async def test_subscribers_receive_emitted_payloads() -> None:
    bus = RequestEventBus()
    first = bus.subscribe("mcp-request")
    second = bus.subscribe("mcp-request")

    await bus.emit("mcp-request", {"id": "r1"})

    assert first.get_nowait() == {"id": "r1"}
    assert second.get_nowait() == {"id": "r1"}


@pytest.mark.asyncio
async def test_emit_without_subscribers_is_dropped() -> None:
    bus = RequestEventBus()
    queue = bus.subscribe("mcp-request")

    await bus.emit("ipc-mcp-request", {"id": "r1"})

    assert queue.empty()
