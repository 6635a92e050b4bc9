from pathlib import Path
from typing import List

import pytest
from typer.testing import CliRunner

import ask_human.cli as cli_module
from ask_human import __version__
from ask_human.cli import create_app, create_ui_app
from ask_human.console.app import PopupConsole
from ask_human.errors import ConfigurationError
from ask_human.ipc.protocol import IpcRequest
from ask_human.runtime_config import RuntimeConfig

REQUEST = IpcRequest(
    id="r1", message="Continue?", predefined_options=["Yes", "No"], is_markdown=False
)


class MockConsole(PopupConsole):
    """PopupConsole that answers without a terminal."""

    def __init__(self, config: RuntimeConfig, answer: str) -> None:
        super().__init__(config)
        self.answer = answer
        self.run_called = False
        self.request_files: List[Path] = []

    async def run_once(self, request_file: Path) -> str:
        self.request_files.append(request_file)
        return self.answer

    async def run(self) -> None:
        self.run_called = True


@pytest.fixture
def request_file(tmp_path: Path) -> Path:
    path = tmp_path / "mcp_request_r1.json"
    path.write_text(REQUEST.to_pretty_json(), encoding="utf-8")
    return path


def test_ui_version_flag_exits_cleanly() -> None:
    result = CliRunner().invoke(create_ui_app(), ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_ui_mcp_request_prints_answer(request_file: Path) -> None:
    consoles: List[MockConsole] = []

    def factory(config: RuntimeConfig) -> PopupConsole:
        console = MockConsole(config, answer="No")
        consoles.append(console)
        return console

    result = CliRunner().invoke(
        create_ui_app(factory), ["--mcp-request", str(request_file)]
    )

    assert result.exit_code == 0
    assert result.stdout.strip() == "No"
    assert consoles[0].request_files == [request_file]
    assert not consoles[0].run_called


def test_ui_mcp_request_cancel_prints_nothing(request_file: Path) -> None:
    app = create_ui_app(lambda config: MockConsole(config, answer=""))
    result = CliRunner().invoke(app, ["--mcp-request", str(request_file)])

    assert result.exit_code == 0
    assert result.stdout.strip() == ""


def test_ui_mcp_request_bad_file_fails(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")

    result = CliRunner().invoke(create_ui_app(), ["--mcp-request", str(bad)])

    assert result.exit_code == 1


def test_ui_without_arguments_runs_resident_console(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("ASK_HUMAN_SOCKET_PATH", str(tmp_path / "ui.sock"))
    consoles: List[MockConsole] = []

    def factory(config: RuntimeConfig) -> PopupConsole:
        console = MockConsole(config, answer="")
        consoles.append(console)
        return console

    result = CliRunner().invoke(create_ui_app(factory), [])

    assert result.exit_code == 0
    assert consoles[0].run_called
    assert consoles[0].config.socket_path == tmp_path / "ui.sock"


def test_ask_prints_answer(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: List[IpcRequest] = []

    async def fake_create_popup(request: IpcRequest, config: RuntimeConfig) -> str:
        seen.append(request)
        return "Yes"

    monkeypatch.setattr(cli_module, "create_popup", fake_create_popup)

    result = CliRunner().invoke(
        create_app(), ["ask", "Continue?", "-o", "Yes", "-o", "No", "--markdown"]
    )

    assert result.exit_code == 0
    assert result.stdout.strip() == "Yes"
    assert seen[0].message == "Continue?"
    assert seen[0].predefined_options == ["Yes", "No"]
    assert seen[0].is_markdown is True


def test_ask_reports_fallback_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_create_popup(request: IpcRequest, config: RuntimeConfig) -> str:
        raise ConfigurationError("Unable to find the ask-human-ui command")

    monkeypatch.setattr(cli_module, "create_popup", failing_create_popup)

    result = CliRunner().invoke(create_app(), ["ask", "Continue?"])

    assert result.exit_code == 1


def test_serve_runs_stdio_server(monkeypatch: pytest.MonkeyPatch) -> None:
    started: List[bool] = []

    async def fake_run_stdio_server() -> None:
        started.append(True)

    monkeypatch.setattr(cli_module, "run_stdio_server", fake_run_stdio_server)

    result = CliRunner().invoke(create_app(), ["serve"])

    assert result.exit_code == 0
    assert started == [True]
