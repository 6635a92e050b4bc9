"""
IPC server embedded in the UI process.

Accepts local connections and runs one request/response exchange per
connection, driving a BrokerState.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Set

from ask_human.errors import CancellationError, ProtocolError
from ask_human.ipc.broker import BrokerState, Resolver
from ask_human.ipc.protocol import IpcRequest, IpcResponse
from ask_human.ipc.transport import Transport, default_transport
from ask_human.runtime_config import get_socket_path

logger = logging.getLogger(__name__)

CHANNEL_CLOSED_ERROR = "response channel closed"

# How long close() lets released connections write their failure response
CLOSE_GRACE_SECONDS = 1.0


class IpcServer:
    """Local-socket server feeding requests into a BrokerState."""

    state: BrokerState
    socket_path: Path

    _transport: Transport
    _server: Optional[asyncio.AbstractServer]
    _connections: Set["asyncio.Task[Any]"]
    _background: Set["asyncio.Task[Any]"]

    def __init__(
        self,
        state: BrokerState,
        socket_path: Optional[Path] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self.state = state
        self.socket_path = socket_path or get_socket_path()
        self._transport = transport or default_transport()
        self._server = None
        self._connections = set()
        self._background = set()

    async def __aenter__(self) -> "IpcServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    async def start(self) -> None:
        """Remove a stale socket file, bind and start accepting connections."""
        # No lock is taken: two servers starting together race on this path
        self._transport.remove_endpoint(self.socket_path)
        self._server = await self._transport.start_server(
            self._handle_connection, self.socket_path
        )
        logger.info(f"IPC server listening on {self.socket_path}")

    def add_background_task(self, task: "asyncio.Task[Any]") -> None:
        """Tie a task's lifetime to the server; it is cancelled on close()."""
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def close(self) -> None:
        """Stop accepting, release waiting connections and remove the socket."""
        if self._server is not None:
            self._server.close()
        await self.state.drop_pending()

        still_running: Set["asyncio.Task[Any]"] = set()
        if self._connections:
            _, still_running = await asyncio.wait(
                list(self._connections), timeout=CLOSE_GRACE_SECONDS
            )

        for task in list(still_running) + list(self._background):
            if not task.done():
                task.cancel()
        pending = list(still_running) + list(self._background)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if self._server is not None:
            await self._server.wait_closed()
            self._server = None
        cleanup_socket(self.socket_path, self._transport)
        logger.info("IPC server stopped")

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._connections.add(task)
        try:
            await self._exchange(reader, writer)
        except ProtocolError as e:
            logger.error(f"Failed to handle IPC connection: {e}")
        except (ConnectionError, OSError) as e:
            logger.error(f"Failed to write IPC response: {e}")
        finally:
            if task is not None:
                self._connections.discard(task)
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def _exchange(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            line = await reader.readline()
        except ValueError as e:
            raise ProtocolError(f"Request line too long: {e}") from e
        if not line:
            # Liveness probe or a peer that gave up
            return

        try:
            text = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Request is not UTF-8: {e}") from e
        request = IpcRequest.from_line(text)
        logger.info(f"Received IPC request: {request.id}")

        resolver = Resolver()
        await self.state.set_pending(request, resolver)
        await self.state.notify_channel().put(request)

        try:
            answer = await resolver.wait()
            response = IpcResponse.ok(request.id, answer)
        except CancellationError:
            logger.warning(f"Response channel closed for request {request.id}")
            response = IpcResponse.failure(request.id, CHANNEL_CLOSED_ERROR)

        writer.write(response.to_line().encode("utf-8"))
        await writer.drain()
        logger.info(f"Sent IPC response for request {request.id}")


def cleanup_socket(
    socket_path: Optional[Path] = None, transport: Optional[Transport] = None
) -> None:
    """Remove the socket file, ignoring errors."""
    transport = transport or default_transport()
    try:
        transport.remove_endpoint(socket_path or get_socket_path())
    except (OSError, NotImplementedError):
        pass
