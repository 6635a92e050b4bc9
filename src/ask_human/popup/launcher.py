"""
Fallback launcher: start a fresh UI process when none is listening.

The request is written to a temp file, the UI executable is run with
``--mcp-request <file>``, and its trimmed stdout is the answer. Everything
here blocks; callers run it on a worker thread.
"""

import contextlib
import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from ask_human.errors import ConfigurationError, ProcessError
from ask_human.ipc.protocol import IpcRequest
from ask_human.runtime_config import (
    CANCELLED_SENTINEL,
    MCP_REQUEST_FLAG,
    UI_COMMAND_NAME,
    VERSION_FLAG,
)

logger = logging.getLogger(__name__)


def request_file_path(request: IpcRequest) -> Path:
    """
    Return the temp file path for a request, named after its id.

    Raises:
        ValueError: If the id would place the file outside the temp directory.
    """
    if request.id in ("", ".", "..") or "/" in request.id or "\\" in request.id:
        raise ValueError(f"Request id {request.id!r} is not usable in a file name")
    return Path(tempfile.gettempdir()) / f"mcp_request_{request.id}.json"


def is_executable(path: Path) -> bool:
    """Check that path is a file the current user may execute."""
    if os.name == "nt":
        return path.is_file() and path.suffix.lower() == ".exe"
    return path.is_file() and os.access(path, os.X_OK)


def command_available(command: str) -> bool:
    """Return True if ``<command> --version`` runs and exits cleanly."""
    try:
        completed = subprocess.run(
            [command, VERSION_FLAG],
            capture_output=True,
            check=False,
        )
    except OSError:
        return False
    return completed.returncode == 0


def default_search_dirs() -> List[Path]:
    """Where our console scripts live: beside the running script, then the interpreter."""
    dirs: List[Path] = []
    if sys.argv and sys.argv[0]:
        dirs.append(Path(sys.argv[0]).resolve().parent)
    interpreter_dir = Path(sys.executable).parent
    if interpreter_dir not in dirs:
        dirs.append(interpreter_dir)
    return dirs


def find_ui_command(
    exe_dir: Optional[Path] = None, command_name: str = UI_COMMAND_NAME
) -> str:
    """
    Locate the UI executable.

    Looks in exe_dir (default: next to the running script, then next to the
    interpreter) first, then on PATH.

    Raises:
        ConfigurationError: If neither location has a usable command.
    """
    search_dirs = [exe_dir] if exe_dir else default_search_dirs()
    file_name = f"{command_name}.exe" if os.name == "nt" else command_name
    for directory in search_dirs:
        local_ui_path = directory / file_name
        if local_ui_path.exists() and is_executable(local_ui_path):
            return str(local_ui_path)

    if command_available(command_name):
        return command_name

    raise ConfigurationError(
        f"Unable to find the {command_name} command. Make sure that:\n"
        f"  1. the project is installed: pip install ask-human (or pip install -e .)\n"
        f"  2. or {command_name} is on your PATH\n"
        f"  3. or {command_name} sits in one of: "
        f"{', '.join(str(d) for d in search_dirs)}"
    )


def create_new_ui_process(
    request: IpcRequest,
    exe_dir: Optional[Path] = None,
    command_name: str = UI_COMMAND_NAME,
) -> str:
    """
    Run a new UI process for request and return the human's answer.

    Returns:
        The trimmed stdout of the UI process, or CANCELLED_SENTINEL when it
        printed nothing.

    Raises:
        ValueError: If the request id cannot be used as a file name.
        OSError: If the request file cannot be written.
        ConfigurationError: If no UI executable can be found.
        ProcessError: If the UI process exits with a nonzero status.
    """
    temp_file = request_file_path(request)
    temp_file.write_text(request.to_pretty_json(), encoding="utf-8")

    try:
        command_path = find_ui_command(exe_dir, command_name)
        logger.info(f"Launching UI process {command_path} for request {request.id}")
        completed = subprocess.run(
            [command_path, MCP_REQUEST_FLAG, str(temp_file)],
            # stdin may be the MCP stdio stream; the UI finds the terminal itself
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    finally:
        with contextlib.suppress(OSError):
            temp_file.unlink()

    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace")
        raise ProcessError(completed.returncode, stderr)

    response = completed.stdout.decode("utf-8", errors="replace").strip()
    if not response:
        return CANCELLED_SENTINEL
    return response
