"""
Collect the human's answer for a request with prompt_toolkit.
"""

import sys
from typing import Optional

from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.input import create_input
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import create_output
from prompt_toolkit.shortcuts import PromptSession

from ask_human.ipc.protocol import IpcRequest

PROMPT = "› "


def resolve_answer(request: IpcRequest, text: str) -> str:
    """Map a typed option number to its option; otherwise return the text."""
    answer = text.strip()
    options = request.predefined_options or []
    if answer.isdigit():
        index = int(answer)
        if 1 <= index <= len(options):
            return options[index - 1]
    return answer


def get_key_bindings() -> KeyBindings:
    """Return newline bindings for multi-line answers."""
    kb = KeyBindings()

    # Support Shift+Enter (mapped to Ctrl+J in your terminal) for newline without submission.
    @kb.add("c-j", eager=True)
    def _(event: KeyPressEvent) -> None:
        event.current_buffer.insert_text("\n")

    # Support Alt+Enter for newline without submission.
    @kb.add(Keys.Escape, Keys.Enter, eager=True)
    def _(event: KeyPressEvent) -> None:
        event.current_buffer.insert_text("\n")

    return kb


def create_prompt_session(request: IpcRequest) -> "PromptSession[str]":
    """Build a session that talks to the terminal even when stdout is piped."""
    return PromptSession(
        input=create_input(always_prefer_tty=True),
        output=create_output(stdout=sys.stderr, always_prefer_tty=True),
        completer=WordCompleter(request.predefined_options or [], sentence=True),
        complete_while_typing=True,
        key_bindings=get_key_bindings(),
    )


async def ask_user(
    request: IpcRequest, session: Optional["PromptSession[str]"] = None
) -> str:
    """
    Prompt for an answer to request.

    Returns an empty string when the human cancels (Ctrl-C, Ctrl-D or an
    empty answer).
    """
    session = session or create_prompt_session(request)
    try:
        text = await session.prompt_async(PROMPT)
    except (KeyboardInterrupt, EOFError):
        return ""
    return resolve_answer(request, text)
