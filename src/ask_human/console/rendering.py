from typing import Optional

from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from ask_human.ipc.protocol import IpcRequest

# stdout carries the answer in one-shot mode
console = Console(stderr=True)


def render_request(request: IpcRequest, target: Optional[Console] = None) -> None:
    """Show a request's message and its numbered options."""
    out = target or console
    body = (
        Markdown(request.message, code_theme="nord", hyperlinks=True)
        if request.is_markdown
        else Text(request.message)
    )
    parts = [body]
    if request.predefined_options:
        options = Text()
        for index, option in enumerate(request.predefined_options, start=1):
            options.append(f"\n  {index}. ", style="bold cyan")
            options.append(option)
        parts.append(options)
    out.print(
        Panel(
            Group(*parts),
            title="[bold cyan]Question[/bold cyan]",
            title_align="left",
            expand=False,
        )
    )


def render_error(message: str, target: Optional[Console] = None) -> None:
    out = target or console
    out.print(f"[bold red]error: {message}[/bold red]")
