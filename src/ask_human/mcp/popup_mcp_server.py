#!/usr/bin/env python3
"""
MCP server exposing the ask_human tool.
This runs as a separate process and communicates via stdio.
"""

import logging
import uuid
from typing import Any, Dict, List

import mcp.server.stdio
from mcp.server.lowlevel import Server
from mcp.types import TextContent, Tool

from ask_human.ipc.protocol import IpcRequest
from ask_human.popup.orchestrator import create_popup
from ask_human.runtime_config import RuntimeConfig

logger = logging.getLogger(__name__)

ASK_HUMAN_TOOL = "ask_human"

server: Any = Server("ask-human")


def build_request(arguments: Dict[str, Any]) -> IpcRequest:
    """Turn tool arguments into an IpcRequest with a fresh id."""
    message = arguments.get("message")
    if not isinstance(message, str) or not message.strip():
        raise ValueError("'message' is required")

    options = arguments.get("predefined_options")
    if options is not None:
        if not isinstance(options, list):
            raise ValueError("'predefined_options' must be a list of strings")
        options = [str(o) for o in options]

    return IpcRequest(
        id=str(uuid.uuid4()),
        message=message,
        predefined_options=options or None,
        is_markdown=bool(arguments.get("is_markdown", False)),
    )


@server.list_tools()  # type: ignore[misc]
async def list_tools() -> List[Tool]:
    """List available tools."""
    return [
        Tool(
            name=ASK_HUMAN_TOOL,
            description=(
                "Ask the human operator a question and wait for their answer. "
                "Use predefined_options to offer quick choices."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "message": {
                        "type": "string",
                        "description": "The question or message to show",
                    },
                    "predefined_options": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Optional answers the human can pick from",
                    },
                    "is_markdown": {
                        "type": "boolean",
                        "description": "Render the message as Markdown (default: false)",
                        "default": False,
                    },
                },
                "required": ["message"],
            },
        ),
    ]


@server.call_tool()  # type: ignore[misc]
async def call_tool(
    name: str, arguments: Dict[str, Any] | None = None
) -> List[TextContent]:
    """Execute a tool and return results."""
    arguments = arguments or {}

    if name != ASK_HUMAN_TOOL:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]

    try:
        request = build_request(arguments)
        logger.info(f"ask_human tool called, request {request.id}")
        answer = await create_popup(request, RuntimeConfig.from_env())
        return [TextContent(type="text", text=answer)]
    except Exception as e:
        logger.exception("ask_human tool failed")
        return [TextContent(type="text", text=f"Error: {str(e)}")]


async def run_stdio_server() -> None:
    """Serve the MCP protocol over stdin/stdout until the client disconnects."""
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )


if __name__ == "__main__":
    import asyncio

    asyncio.run(run_stdio_server())
