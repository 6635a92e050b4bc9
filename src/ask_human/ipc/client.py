"""
IPC client used by the backend to reach a running UI process.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from ask_human.errors import (
    ConnectionClosedError,
    IpcConnectionError,
    IpcResponseError,
    IpcTimeoutError,
    ProtocolError,
)
from ask_human.ipc.protocol import IpcRequest, IpcResponse
from ask_human.ipc.transport import Transport, default_transport
from ask_human.runtime_config import RESPONSE_TIMEOUT_SECONDS, get_socket_path

logger = logging.getLogger(__name__)


async def _close_writer(writer: asyncio.StreamWriter) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except (ConnectionError, OSError):
        pass


class IpcClient:
    """Talks to the UI process over its well-known local socket."""

    socket_path: Path
    timeout: float

    _transport: Transport

    def __init__(
        self,
        socket_path: Optional[Path] = None,
        timeout: float = RESPONSE_TIMEOUT_SECONDS,
        transport: Optional[Transport] = None,
    ) -> None:
        self.socket_path = socket_path or get_socket_path()
        self.timeout = timeout
        self._transport = transport or default_transport()

    async def is_reachable(self) -> bool:
        """
        Return True if the socket file exists and accepts a connection.

        Raises:
            UnsupportedPlatformError: If this platform has no local sockets.
        """
        try:
            if not self._transport.endpoint_exists(self.socket_path):
                return False
        except OSError as e:
            logger.debug(f"Cannot stat socket {self.socket_path}: {e}")
            return False
        try:
            _, writer = await self._transport.open_connection(self.socket_path)
        except OSError:
            return False
        await _close_writer(writer)
        return True

    async def send_request(self, request: IpcRequest) -> str:
        """
        Send one request and wait for the UI's answer.

        Returns:
            The answer text from a successful response.

        Raises:
            IpcConnectionError: If the socket cannot be reached or breaks.
            IpcTimeoutError: If no response arrives within the timeout.
            ConnectionClosedError: If the UI closes without answering.
            ProtocolError: If the response line is malformed.
            IpcResponseError: If the UI reports a failure.
        """
        try:
            reader, writer = await self._transport.open_connection(self.socket_path)
        except OSError as e:
            raise IpcConnectionError(f"Unable to connect to UI process: {e}") from e

        try:
            try:
                writer.write(request.to_line().encode("utf-8"))
                await writer.drain()
            except OSError as e:
                raise IpcConnectionError(f"Failed to send request: {e}") from e

            try:
                line = await asyncio.wait_for(reader.readline(), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise IpcTimeoutError(
                    f"Timed out after {self.timeout:g}s waiting for a response"
                ) from e
            except ValueError as e:
                raise ProtocolError(f"Response line too long: {e}") from e
            except OSError as e:
                raise IpcConnectionError(f"Failed to read response: {e}") from e
        finally:
            await _close_writer(writer)

        if not line:
            raise ConnectionClosedError("Connection closed before a response arrived")

        try:
            text = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Response is not UTF-8: {e}") from e
        response = IpcResponse.from_line(text)
        if response.id != request.id:
            logger.warning(
                f"Response id {response.id} does not match request id {request.id}"
            )

        if response.success:
            return response.response
        raise IpcResponseError(response.error or "unknown error")
