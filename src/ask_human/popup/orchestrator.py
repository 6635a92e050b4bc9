"""
Popup orchestration: prefer a running UI over IPC, else launch a new one.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from ask_human.errors import IpcError
from ask_human.ipc.client import IpcClient
from ask_human.ipc.protocol import IpcRequest
from ask_human.popup.launcher import create_new_ui_process
from ask_human.runtime_config import RuntimeConfig

logger = logging.getLogger(__name__)

Launcher = Callable[[IpcRequest], str]

# Blocking UI launches never run on the event loop's default executor
_launcher_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="ui-launcher")


async def create_popup(
    request: IpcRequest,
    config: Optional[RuntimeConfig] = None,
    client: Optional[IpcClient] = None,
    launcher: Optional[Launcher] = None,
) -> str:
    """
    Ask the human and return their answer.

    A running UI is tried first over IPC. Any IPC failure is logged and
    superseded by launching a fresh UI process; only that fallback's errors
    reach the caller.

    Raises:
        ConfigurationError: If the fallback cannot find a UI executable.
        ProcessError: If the fallback UI process fails.
    """
    config = config or RuntimeConfig.from_env()
    if client is None:
        client = IpcClient(config.socket_path, timeout=config.response_timeout)
    if launcher is None:

        def launcher(req: IpcRequest) -> str:
            return create_new_ui_process(req, command_name=config.ui_command)

    try:
        if await client.is_reachable():
            logger.info(f"UI is running, sending request {request.id} over IPC")
            response = await client.send_request(request)
            logger.info(f"IPC response received for request {request.id}")
            return response
    except IpcError as e:
        logger.warning(f"IPC request failed: {e}; falling back to a new UI process")

    logger.info(f"Starting a new UI process for request {request.id}")
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_launcher_executor, launcher, request)
