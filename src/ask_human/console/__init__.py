"""
Console subpackage: the UI process's event bus, rendering, prompt and app loop.
"""

from ask_human.console.app import PopupConsole

__all__ = ["PopupConsole"]
