"""Popup orchestration and the fallback UI launcher."""

from .launcher import create_new_ui_process, find_ui_command
from .orchestrator import create_popup

__all__ = ["create_new_ui_process", "create_popup", "find_ui_command"]
