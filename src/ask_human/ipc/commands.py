"""
Command surface the UI uses to start the IPC server and deliver answers.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from ask_human.errors import IpcError
from ask_human.ipc.broker import BrokerState
from ask_human.ipc.protocol import IpcRequest
from ask_human.ipc.server import IpcServer
from ask_human.runtime_config import REQUEST_CHANNELS

logger = logging.getLogger(__name__)

EmitFn = Callable[[str, Dict[str, Any]], Awaitable[None]]


@dataclass
class IpcStateHolder:
    """Shares the running server's BrokerState with the UI."""

    state: Optional[BrokerState] = None


async def send_ipc_response(
    holder: IpcStateHolder, request_id: str, response: str
) -> None:
    """
    Deliver the human's answer to the waiting connection.

    Raises:
        IpcError: If the IPC server has not been started.
        NothingPendingError: If no request is waiting.
        MismatchError: If request_id is not the pending request.
    """
    if holder.state is None:
        raise IpcError("IPC server is not initialized")
    await holder.state.resolve(request_id, response)


async def forward_requests(
    requests: "asyncio.Queue[IpcRequest]",
    emit: EmitFn,
    channels: Sequence[str] = REQUEST_CHANNELS,
) -> None:
    """Publish each new request to every channel, in order, forever."""
    while True:
        request = await requests.get()
        logger.info(f"Forwarding IPC request to UI: {request.id}")
        payload = request.to_dict()
        for channel in channels:
            try:
                await emit(channel, dict(payload))
            except Exception:
                logger.exception(f"Failed to emit request event on '{channel}'")


async def start_ipc_server(
    holder: IpcStateHolder,
    emit: EmitFn,
    channels: Sequence[str] = REQUEST_CHANNELS,
    socket_path: Optional[Path] = None,
) -> IpcServer:
    """
    Start the IPC server and forward its requests to the UI event channels.

    The returned server owns the forwarding task; close() stops both.
    """
    state = BrokerState()
    server = IpcServer(state, socket_path=socket_path)
    holder.state = state

    await server.start()

    server.add_background_task(
        asyncio.create_task(
            forward_requests(state.notify_channel(), emit, tuple(channels))
        )
    )
    return server
