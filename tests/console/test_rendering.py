import pytest
from rich.console import Console

import ask_human.console.rendering as rendering
from ask_human.ipc.protocol import IpcRequest


@pytest.fixture(autouse=True)
def record_console(monkeypatch: pytest.MonkeyPatch) -> Console:
    """Replace rendering.console with a record-capable Console."""
    recorder = Console(record=True, width=80)
    monkeypatch.setattr(rendering, "console", recorder)
    return recorder


def test_render_plain_request_with_options(record_console: Console) -> None:
    rendering.render_request(
        IpcRequest(
            id="r1",
            message="Continue?",
            predefined_options=["Yes", "No"],
            is_markdown=False,
        )
    )
    out = record_console.export_text()
    assert "Question" in out
    assert "Continue?" in out
    assert "1. Yes" in out
    assert "2. No" in out


def test_render_markdown_request(record_console: Console) -> None:
    rendering.render_request(
        IpcRequest(id="r2", message="**bold** and `code`", is_markdown=True)
    )
    out = record_console.export_text()
    assert "bold" in out
    assert "**" not in out
    assert "code" in out


def test_render_error(record_console: Console) -> None:
    rendering.render_error("answer not delivered")
    assert "error: answer not delivered" in record_console.export_text()
