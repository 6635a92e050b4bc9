"""
Runtime configuration for ask-human.

This module provides:
- load_envs(): load ASK_HUMAN_* settings from a .env file if they are not
  already present in the environment.
- RuntimeConfig: a dataclass holding the socket path, client timeout, UI
  command name and request notification channels.
- get_socket_path() / get_data_dir(): well-known filesystem locations.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import dotenv_values

# Environment variable names for overridable settings
SOCKET_PATH_ENV: str = "ASK_HUMAN_SOCKET_PATH"
RESPONSE_TIMEOUT_ENV: str = "ASK_HUMAN_RESPONSE_TIMEOUT"
UI_COMMAND_ENV: str = "ASK_HUMAN_UI_COMMAND"
LOG_LEVEL_ENV: str = "ASK_HUMAN_LOG_LEVEL"
LOG_STDERR_ENV: str = "ASK_HUMAN_LOG_STDERR"

SOCKET_FILE_NAME: str = "ask-human-ui.sock"

# Humans may take a long time to answer
RESPONSE_TIMEOUT_SECONDS: float = 600.0

UI_COMMAND_NAME: str = "ask-human-ui"
MCP_REQUEST_FLAG: str = "--mcp-request"
VERSION_FLAG: str = "--version"

CANCELLED_SENTINEL: str = "User cancelled the operation"

# Current channel first, legacy listener name second
REQUEST_CHANNELS: Tuple[str, ...] = ("mcp-request", "ipc-mcp-request")


def load_envs(env_file: Optional[str] = None) -> None:
    """
    Load ASK_HUMAN_* settings from a .env file into the process environment
    if they are not already set.
    """
    env_values = dotenv_values(env_file) if env_file else dotenv_values()
    for key in (
        SOCKET_PATH_ENV,
        RESPONSE_TIMEOUT_ENV,
        UI_COMMAND_ENV,
        LOG_LEVEL_ENV,
        LOG_STDERR_ENV,
    ):
        if not os.environ.get(key):
            val = env_values.get(key)
            if val:
                os.environ[key] = str(val)


def get_socket_path() -> Path:
    """
    Return the well-known UI socket path, honouring ASK_HUMAN_SOCKET_PATH.
    """
    override = os.environ.get(SOCKET_PATH_ENV)
    if override:
        return Path(override)
    return Path(tempfile.gettempdir()) / SOCKET_FILE_NAME


def get_data_dir() -> Path:
    """
    Return the ask-human data directory under XDG_DATA_HOME or fallback to ~/.local/share.
    """
    data_home = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return data_home / "ask_human"


def _timeout_from_env() -> float:
    raw = os.environ.get(RESPONSE_TIMEOUT_ENV)
    if not raw:
        return RESPONSE_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{RESPONSE_TIMEOUT_ENV} must be a number, got '{raw}'")
    if value <= 0:
        raise ValueError(f"{RESPONSE_TIMEOUT_ENV} must be positive, got '{raw}'")
    return value


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Holds runtime configuration shared by the backend and the UI process.

    Attributes:
        socket_path: Filesystem path of the UI process's local socket.
        response_timeout: Seconds the client waits for a response line.
        ui_command: Name of the UI executable used by the fallback launcher.
        request_channels: Ordered event channels new requests are published to.
    """

    socket_path: Path = field(default_factory=get_socket_path)
    response_timeout: float = RESPONSE_TIMEOUT_SECONDS
    ui_command: str = UI_COMMAND_NAME
    request_channels: Tuple[str, ...] = REQUEST_CHANNELS

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Build a RuntimeConfig from ASK_HUMAN_* environment variables.
        """
        return cls(
            socket_path=get_socket_path(),
            response_timeout=_timeout_from_env(),
            ui_command=os.environ.get(UI_COMMAND_ENV) or UI_COMMAND_NAME,
        )
