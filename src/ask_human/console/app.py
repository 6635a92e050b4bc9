"""
The UI process: a resident console hosting the IPC server, or a one-shot
prompt for a request file handed over by the fallback launcher.
"""

import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from rich.panel import Panel

from ask_human.console import rendering
from ask_human.console.events import RequestEventBus
from ask_human.console.prompt import ask_user
from ask_human.errors import MismatchError, NothingPendingError, ProtocolError
from ask_human.ipc.commands import IpcStateHolder, send_ipc_response, start_ipc_server
from ask_human.ipc.protocol import IpcRequest
from ask_human.runtime_config import CANCELLED_SENTINEL, RuntimeConfig

logger = logging.getLogger(__name__)

AskFn = Callable[[IpcRequest], Awaitable[str]]


def load_request_file(path: Path) -> IpcRequest:
    """Read a request written by the fallback launcher."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Malformed request file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError(f"Request file {path} does not hold a JSON object")
    return IpcRequest.from_dict(data)


class PopupConsole:
    """Console front-end that answers requests from the backend."""

    config: RuntimeConfig
    holder: IpcStateHolder

    def __init__(self, config: RuntimeConfig, ask: Optional[AskFn] = None) -> None:
        self.config = config
        self.holder = IpcStateHolder()
        self._ask = ask or ask_user

    async def run_once(self, request_file: Path) -> str:
        """Answer a single request file; returns "" when cancelled."""
        request = load_request_file(request_file)
        logger.info(f"Answering request {request.id} from {request_file}")
        rendering.render_request(request)
        return await self._ask(request)

    async def run(self) -> None:
        """Serve requests over IPC until interrupted."""
        bus = RequestEventBus()
        requests = bus.subscribe(self.config.request_channels[0])
        server = await start_ipc_server(
            self.holder,
            bus.emit,
            channels=self.config.request_channels,
            socket_path=self.config.socket_path,
        )
        rendering.console.print(
            Panel(
                f"[bold cyan]ask-human[/bold cyan]\n\n"
                f"[dim]Listening on:[/dim] [dim cyan]{self.config.socket_path}[/dim cyan]",
                expand=False,
            )
        )
        try:
            while True:
                payload = await requests.get()
                await self.handle_request(IpcRequest.from_dict(payload))
        finally:
            await server.close()

    async def handle_request(self, request: IpcRequest) -> None:
        """Prompt for one forwarded request and deliver the answer."""
        state = self.holder.state
        pending = state.pending_request if state else None
        if pending is None or pending.id != request.id:
            # Replaced by a newer request while queued
            logger.info(f"Skipping stale request {request.id}")
            return

        rendering.render_request(request)
        answer = await self._ask(request)
        try:
            await send_ipc_response(
                self.holder, request.id, answer or CANCELLED_SENTINEL
            )
        except (NothingPendingError, MismatchError) as e:
            logger.warning(f"Answer for {request.id} not delivered: {e}")
            rendering.render_error(f"answer not delivered: {e}")
