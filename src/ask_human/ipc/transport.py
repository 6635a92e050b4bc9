"""
Platform transports for the UI socket.

UnixSocketTransport speaks over an AF_UNIX stream socket. On platforms
without AF_UNIX, UnsupportedTransport raises UnsupportedPlatformError so
callers can tell "cannot check here" apart from "definitely not running".
"""

import asyncio
import socket
from pathlib import Path
from typing import Awaitable, Callable, Protocol, Tuple, runtime_checkable

from ask_human.errors import UnsupportedPlatformError

# A request line may carry a long markdown message
STREAM_LIMIT = 4 * 1024 * 1024

ConnectionHandler = Callable[
    [asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]
]


@runtime_checkable
class Transport(Protocol):
    """Local stream transport used by IpcServer and IpcClient."""

    async def start_server(
        self, handler: ConnectionHandler, path: Path
    ) -> asyncio.AbstractServer: ...

    async def open_connection(
        self, path: Path
    ) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]: ...

    def endpoint_exists(self, path: Path) -> bool: ...

    def remove_endpoint(self, path: Path) -> None: ...


class UnixSocketTransport:
    """Transport over a filesystem-addressed Unix domain socket."""

    async def start_server(
        self, handler: ConnectionHandler, path: Path
    ) -> asyncio.AbstractServer:
        path.parent.mkdir(parents=True, exist_ok=True)
        return await asyncio.start_unix_server(
            handler, path=str(path), limit=STREAM_LIMIT
        )

    async def open_connection(
        self, path: Path
    ) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await asyncio.open_unix_connection(str(path), limit=STREAM_LIMIT)

    def endpoint_exists(self, path: Path) -> bool:
        return path.exists()

    def remove_endpoint(self, path: Path) -> None:
        if path.exists():
            path.unlink()


class UnsupportedTransport:
    """Stand-in for platforms that lack local stream sockets."""

    def _unsupported(self) -> UnsupportedPlatformError:
        return UnsupportedPlatformError(
            "Local socket IPC is not implemented on this platform"
        )

    async def start_server(
        self, handler: ConnectionHandler, path: Path
    ) -> asyncio.AbstractServer:
        raise self._unsupported()

    async def open_connection(
        self, path: Path
    ) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        raise self._unsupported()

    def endpoint_exists(self, path: Path) -> bool:
        raise self._unsupported()

    def remove_endpoint(self, path: Path) -> None:
        raise self._unsupported()


def default_transport() -> Transport:
    """Return the transport matching this platform's capabilities."""
    if hasattr(socket, "AF_UNIX"):
        return UnixSocketTransport()
    return UnsupportedTransport()
