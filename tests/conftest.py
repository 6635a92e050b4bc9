import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Awaitable, Callable, Iterator

import pytest

from ask_human.ipc.protocol import IpcRequest
from ask_human.runtime_config import (
    LOG_LEVEL_ENV,
    LOG_STDERR_ENV,
    RESPONSE_TIMEOUT_ENV,
    SOCKET_PATH_ENV,
    UI_COMMAND_ENV,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep logs and settings out of the real user environment."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in (
        SOCKET_PATH_ENV,
        RESPONSE_TIMEOUT_ENV,
        UI_COMMAND_ENV,
        LOG_LEVEL_ENV,
        LOG_STDERR_ENV,
    ):
        # setenv first so values written by load_envs() are undone afterwards
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


@pytest.fixture
def socket_path() -> Iterator[Path]:
    """A socket path short enough for AF_UNIX (tmp_path can exceed the limit)."""
    directory = Path(tempfile.mkdtemp(prefix="ah-", dir="/tmp"))
    yield directory / "ui.sock"
    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture
def make_request() -> Callable[..., IpcRequest]:
    def _make(
        request_id: str = "r1",
        message: str = "Continue?",
        predefined_options: list[str] | None = None,
        is_markdown: bool = False,
    ) -> IpcRequest:
        return IpcRequest(
            id=request_id,
            message=message,
            predefined_options=predefined_options,
            is_markdown=is_markdown,
        )

    return _make


async def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Poll a predicate until it holds or the timeout elapses."""
    return _wait_until
