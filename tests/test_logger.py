import logging
from pathlib import Path
from typing import Iterator

import pytest
from rich.logging import RichHandler

from ask_human.logger import get_log_file, setup_logging


@pytest.fixture
def fresh_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[logging.Logger]:
    logger = logging.getLogger("ask_human")
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "propagate", True)
    monkeypatch.setattr(logger, "level", logging.NOTSET)
    yield logger
    for handler in logger.handlers:
        handler.close()


def test_log_file_lives_under_data_dir(tmp_path: Path) -> None:
    assert get_log_file() == tmp_path / "data" / "ask_human" / "logs" / "ask_human.log"


def test_setup_logging_writes_to_file(
    fresh_logger: logging.Logger, tmp_path: Path
) -> None:
    log_file = tmp_path / "logs" / "test.log"
    setup_logging(log_file)

    logging.getLogger("ask_human.ipc.server").info("hello from the server")
    for handler in fresh_logger.handlers:
        handler.flush()

    assert not fresh_logger.propagate
    assert "hello from the server" in log_file.read_text(encoding="utf-8")


def test_setup_logging_only_configures_once(
    fresh_logger: logging.Logger, tmp_path: Path
) -> None:
    setup_logging(tmp_path / "a.log")
    setup_logging(tmp_path / "b.log")

    assert len(fresh_logger.handlers) == 1
    assert not (tmp_path / "b.log").exists()


def test_setup_logging_level_and_stderr_mirror(
    fresh_logger: logging.Logger,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("ASK_HUMAN_LOG_LEVEL", "debug")
    monkeypatch.setenv("ASK_HUMAN_LOG_STDERR", "1")

    setup_logging(tmp_path / "x.log")

    assert fresh_logger.level == logging.DEBUG
    assert any(isinstance(h, RichHandler) for h in fresh_logger.handlers)
