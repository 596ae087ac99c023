"""MCP server that exposes defgen tools to MCP clients.

This server wraps the `defgen` CLI tool, providing structured access to
expression analysis and definition generation through the Model Context
Protocol.
"""

import json
import subprocess
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

_GENERATE_COMMANDS = {
    "function": ["generate"],
    "static": ["generate", "--static"],
    "class": ["generate-class"],
}

# Initialize MCP server
app = Server("defgen")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """Declare available tools."""
    return [
        Tool(
            name="defgen_analyze",
            description=(
                "Describe the Python expression at a file position: its name, the raw "
                "call arguments, its qualifying parent, and whether the name is already "
                "defined in the file. Use this before generating a definition."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "position": {
                        "type": "string",
                        "description": (
                            "Position in format 'file_path:line:column' (line 1-based, column "
                            "0-based). Example: 'src/app.py:12:8'"
                        ),
                    }
                },
                "required": ["position"],
            },
        ),
        Tool(
            name="defgen_generate",
            description=(
                "Generate the missing Python function, method, or class used at a file "
                "position, with parameters taken from the call's arguments. The file is "
                "edited in place."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "position": {
                        "type": "string",
                        "description": "Position in format 'file_path:line:column'",
                    },
                    "kind": {
                        "type": "string",
                        "enum": sorted(_GENERATE_COMMANDS),
                        "description": "What to generate (default: function)",
                    },
                },
                "required": ["position"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls by routing to appropriate CLI commands."""
    if name == "defgen_analyze":
        return await _handle_analyze(arguments["position"])
    elif name == "defgen_generate":
        return await _handle_generate(arguments["position"], arguments.get("kind", "function"))

    raise ValueError(f"Unknown tool: {name}")


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


async def _handle_analyze(position: str) -> list[TextContent]:
    """Handle defgen_analyze tool calls.

    Args:
        position: Position in format "file_path:line:column"

    Returns:
        List containing a single TextContent with JSON results
    """
    try:
        result = subprocess.run(
            ["defgen", "analyze", position],
            capture_output=True,
            text=True,
            check=True,
        )

        descriptor = json.loads(result.stdout)
        return _text(json.dumps(descriptor, indent=2))

    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip() if e.stderr else str(e)
        return _text(f"Error running defgen analyze: {error_msg}")
    except json.JSONDecodeError as e:
        return _text(f"Error parsing defgen output: {e}")
    except Exception as e:
        return _text(f"Unexpected error: {e}")


async def _handle_generate(position: str, kind: str) -> list[TextContent]:
    """Handle defgen_generate tool calls.

    Args:
        position: Position in format "file_path:line:column"
        kind: "function", "static", or "class"

    Returns:
        List containing a single TextContent with the outcome
    """
    command = _GENERATE_COMMANDS.get(kind)
    if command is None:
        return _text(f"Unknown kind '{kind}', expected one of: {', '.join(sorted(_GENERATE_COMMANDS))}")

    try:
        result = subprocess.run(
            ["defgen", *command, position],
            capture_output=True,
            text=True,
            check=True,
        )
        return _text(result.stdout.strip())

    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip() if e.stderr else str(e)
        return _text(f"Error running defgen {command[0]}: {error_msg}")
    except Exception as e:
        return _text(f"Unexpected error: {e}")


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
