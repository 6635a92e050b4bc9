import asyncio
import logging
import uuid
from pathlib import Path
from typing import Callable, List, Optional

import typer
from typing_extensions import Annotated

from ask_human import __version__
from ask_human.console.app import PopupConsole
from ask_human.errors import AskHumanError, PopupError
from ask_human.ipc.protocol import IpcRequest
from ask_human.logger import setup_logging
from ask_human.mcp.popup_mcp_server import run_stdio_server
from ask_human.popup.orchestrator import create_popup
from ask_human.runtime_config import MCP_REQUEST_FLAG, RuntimeConfig, load_envs

# Global factory function - set by create_ui_app()
_console_factory: Optional[Callable[[RuntimeConfig], PopupConsole]] = None


def default_console_factory(config: RuntimeConfig) -> PopupConsole:
    """Default factory for creating PopupConsole instances."""
    return PopupConsole(config)


def serve() -> None:
    """Run the MCP tool server over stdio."""
    logger = logging.getLogger(__name__)
    logger.info("Starting ask-human MCP server")
    asyncio.run(run_stdio_server())


def ask(
    message: Annotated[str, typer.Argument(help="Question to ask the human")],
    option: Annotated[
        Optional[List[str]],
        typer.Option("--option", "-o", help="Predefined answer (repeatable)"),
    ] = None,
    markdown: Annotated[
        bool, typer.Option("--markdown", help="Render the message as Markdown")
    ] = False,
) -> None:
    """Ask the human one question and print the answer."""
    request = IpcRequest(
        id=str(uuid.uuid4()),
        message=message,
        predefined_options=option or None,
        is_markdown=markdown,
    )
    try:
        answer = asyncio.run(create_popup(request, RuntimeConfig.from_env()))
    except PopupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(answer)


def create_app() -> typer.Typer:
    """
    Create the backend Typer application (`ask-human`).

    Returns:
        Typer application
    """
    # Load ASK_HUMAN_* settings from .env if not already set in the environment
    load_envs()

    app = typer.Typer(rich_markup_mode=None, no_args_is_help=True)

    @app.callback()
    def main() -> None:
        """ASK HUMAN - ask a human from an automated backend"""
        setup_logging()

    app.command("serve")(serve)
    app.command("ask")(ask)
    return app


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ask-human-ui {__version__}")
        raise typer.Exit()


def create_ui_app(
    console_factory: Optional[Callable[[RuntimeConfig], PopupConsole]] = None,
) -> typer.Typer:
    """
    Create the UI Typer application (`ask-human-ui`).

    Args:
        console_factory: Factory function to create PopupConsole instances

    Returns:
        Typer application
    """
    load_envs()

    global _console_factory
    _console_factory = console_factory

    app = typer.Typer(rich_markup_mode=None)

    @app.command()
    def main(
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=_version_callback,
                is_eager=True,
                help="Show the version and exit",
            ),
        ] = False,
        mcp_request: Annotated[
            Optional[Path],
            typer.Option(
                MCP_REQUEST_FLAG,
                exists=True,
                dir_okay=False,
                help="Answer a single request file and print the answer to stdout",
            ),
        ] = None,
    ) -> None:
        """ASK HUMAN UI - answers questions from the backend"""
        setup_logging()
        logger = logging.getLogger(__name__)

        config = RuntimeConfig.from_env()
        factory = _console_factory or default_console_factory
        console = factory(config)

        if mcp_request is not None:
            try:
                answer = asyncio.run(console.run_once(mcp_request))
            except AskHumanError as e:
                typer.echo(f"Error: {e}", err=True)
                raise typer.Exit(code=1)
            if answer:
                typer.echo(answer)
            return

        logger.info(f"Starting resident UI on {config.socket_path}")
        try:
            asyncio.run(console.run())
        except AskHumanError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        except KeyboardInterrupt:
            typer.echo("\nExiting...", err=True)

    return app


# Create default app instances for the console scripts
app = create_app()
ui_app = create_ui_app()


if __name__ == "__main__":
    app()
