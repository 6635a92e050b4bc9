"""
IPC between the backend and a running UI process.
"""

from .broker import BrokerState, PendingRequest, Resolver
from .client import IpcClient
from .commands import IpcStateHolder, send_ipc_response, start_ipc_server
from .protocol import IpcRequest, IpcResponse
from .server import IpcServer, cleanup_socket

__all__ = [
    "BrokerState",
    "IpcClient",
    "IpcRequest",
    "IpcResponse",
    "IpcServer",
    "IpcStateHolder",
    "PendingRequest",
    "Resolver",
    "cleanup_socket",
    "send_ipc_response",
    "start_ipc_server",
]
