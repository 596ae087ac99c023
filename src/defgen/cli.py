import asyncio
import json
import logging
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Callable, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from defgen import __version__, commands, refactor
from defgen.analyzer import analyze as analyze_expression, is_parent_self, parent_text
from defgen.buffer import SourceBuffer
from defgen.config import find_project_root, load_config
from defgen.context import CommandContext
from defgen.errors import DefgenError
from defgen.models import TextRange
from defgen.navigation import BufferNavigator
from defgen.oracle import check_existence
from defgen.parsers import get_parser_for_file
from defgen.prompts import Prompt, StaticPrompt, TyperPrompt

app = typer.Typer(
    help="defgen - generate Python definitions from the code that uses them",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

DRY_RUN_OPTION = typer.Option(
    False, "--dry-run", "-n", help="Print the updated source instead of writing the file"
)


def parse_position(position: str) -> tuple[str, int, int]:
    """Split "file_path:line:column" (line 1-based, column 0-based).

    Raises:
        ValueError: If the line or column is missing or not a number
    """
    parts = position.rsplit(":", 2)
    if len(parts) != 3 or not parts[0]:
        raise ValueError(f"Expected FILE:LINE:COLUMN, got '{position}'")
    file_path, line, column = parts
    try:
        return file_path, int(line), int(column)
    except ValueError:
        raise ValueError(f"Line and column must be numbers in '{position}'")


def parse_line_column(value: str) -> tuple[int, int]:
    line, sep, column = value.partition(":")
    if not sep:
        raise ValueError(f"Expected LINE:COLUMN, got '{value}'")
    try:
        return int(line), int(column)
    except ValueError:
        raise ValueError(f"Line and column must be numbers in '{value}'")


def open_context(position: str, prompt: Prompt | None = None) -> tuple[Path, CommandContext]:
    """Load the file named in position and put the cursor there.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the position is invalid or the file type unsupported
    """
    file_path, line, column = parse_position(position)
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    parser = get_parser_for_file(path)
    if parser is None:
        raise ValueError(f"Unsupported file type: {file_path}")

    config = load_config(find_project_root(path.parent))
    buffer = SourceBuffer(path.read_text())
    buffer.move_to(buffer.offset_for(line, column))
    ctx = CommandContext(
        buffer=buffer,
        parser=parser,
        navigator=BufferNavigator(buffer, parser, receiver=config.receiver),
        prompt=prompt or TyperPrompt(),
        config=config,
    )
    return path, ctx


@contextmanager
def reporting_errors():
    """Turn failures into an error message and a non-zero exit code."""
    try:
        yield
    except typer.Exit:
        raise
    except (DefgenError, FileNotFoundError, ValueError, NotImplementedError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


def run_edit(
    position: str,
    action: Callable[[CommandContext], object],
    dry_run: bool,
    prompt: Prompt | None = None,
) -> None:
    """Run an editing command on a file and write or print the result."""
    with reporting_errors():
        path, ctx = open_context(position, prompt)
        action(ctx)

    if dry_run:
        typer.echo(ctx.buffer.text, nl=False)
        return

    path.write_text(ctx.buffer.text)
    line, column = ctx.buffer.line_column(ctx.buffer.current_offset())
    typer.echo(f"Updated {path} (cursor at {line}:{column})")


@app.command()
def analyze(position: str):
    """Describe the expression at a position as JSON.

    Args:
        position: Location in format "file_path:line:column"

    Examples:
        defgen analyze src/app.py:12:8
    """
    with reporting_errors():
        _path, ctx = open_context(position)
        source = ctx.buffer.text
        descriptor = analyze_expression(source, ctx.buffer.current_offset())
        output = asdict(descriptor)
        output["text"] = descriptor.range.slice(source)
        output["parent"] = parent_text(source, descriptor)
        output["is_parent_self"] = is_parent_self(source, descriptor, ctx.config.receiver)
        output["existence"] = (
            check_existence(ctx.buffer, ctx.navigator, descriptor).value if descriptor.name else None
        )

    typer.echo(json.dumps(output, indent=2))


@app.command()
def generate(
    position: str,
    static: bool = typer.Option(False, "--static", "-s", help="Generate a static method"),
    decorator: Optional[List[str]] = typer.Option(
        None, "--decorator", "-d", help="Decorator to put above the definition (repeatable)"
    ),
    dry_run: bool = DRY_RUN_OPTION,
):
    """Generate the function or method called at a position.

    Examples:
        defgen generate src/app.py:12:8
        defgen generate --static src/app.py:12:8
    """
    run_edit(
        position,
        lambda ctx: commands.generate_function(ctx, static=static, decorators=decorator),
        dry_run,
    )


@app.command("generate-static")
def generate_static(position: str, dry_run: bool = DRY_RUN_OPTION):
    """Generate a static method for the call at a position."""
    run_edit(position, commands.generate_static_function, dry_run)


@app.command("generate-class")
def generate_class(position: str, dry_run: bool = DRY_RUN_OPTION):
    """Generate the class instantiated at a position."""
    run_edit(position, commands.generate_class, dry_run)


@app.command("add-param")
def add_param(
    position: str,
    keyword: bool = typer.Option(False, "--keyword", "-k", help="Add as a keyword parameter (name=)"),
    name: Optional[str] = typer.Option(None, "--name", help="Parameter name (default: symbol at position)"),
    dry_run: bool = DRY_RUN_OPTION,
):
    """Add a parameter to the function enclosing a position."""
    run_edit(
        position,
        lambda ctx: commands.add_parameter(ctx, keyword_argument=keyword, name=name),
        dry_run,
    )


@app.command("remove-param")
def remove_param(
    position: str,
    name: Optional[str] = typer.Option(None, "--name", help="Parameter name (default: symbol at position)"),
    dry_run: bool = DRY_RUN_OPTION,
):
    """Remove a parameter from the function enclosing a position."""
    run_edit(position, lambda ctx: commands.remove_parameter(ctx, name=name), dry_run)


@app.command("add-self")
def add_self(position: str, dry_run: bool = DRY_RUN_OPTION):
    """Add the receiver as the first parameter of the enclosing function."""
    run_edit(position, commands.add_receiver, dry_run)


@app.command("remove-self")
def remove_self(position: str, dry_run: bool = DRY_RUN_OPTION):
    """Remove the receiver parameter from the enclosing function."""
    run_edit(position, commands.remove_receiver, dry_run)


@app.command("make-static")
def make_static(position: str, dry_run: bool = DRY_RUN_OPTION):
    """Turn the enclosing method into a static method."""
    run_edit(position, commands.make_static, dry_run)


@app.command()
def decorate(
    position: str,
    decorator: Optional[str] = typer.Option(None, "--decorator", "-d", help="Decorator (prompted if omitted)"),
    dry_run: bool = DRY_RUN_OPTION,
):
    """Add a decorator to the function enclosing a position."""
    run_edit(position, lambda ctx: refactor.insert_decorator(ctx, decorator), dry_run)


@app.command("toggle-self")
def toggle_self(position: str, dry_run: bool = DRY_RUN_OPTION):
    """Add or strip the receiver qualifier on the symbol at a position."""
    run_edit(position, refactor.toggle_qualifier, dry_run)


@app.command()
def extract(
    position: str,
    end: str = typer.Option(..., "--end", "-e", help="End of the selection as LINE:COLUMN"),
    name: Optional[str] = typer.Option(None, "--name", help="Binding name (prompted if omitted)"),
    dry_run: bool = DRY_RUN_OPTION,
):
    """Extract the text from a position to --end into a named binding.

    Examples:
        defgen extract src/app.py:12:14 --end 12:16 --name limit
    """
    def action(ctx: CommandContext):
        start = ctx.buffer.current_offset()
        end_line, end_column = parse_line_column(end)
        selection = TextRange(start, ctx.buffer.offset_for(end_line, end_column))
        with ctx.buffer.marked(selection):
            refactor.extract_binding(ctx)

    prompt = StaticPrompt(name) if name is not None else None
    run_edit(position, action, dry_run, prompt)


@app.command()
def mcp_server():
    """Start the MCP server exposing defgen tools.

    This command starts a Model Context Protocol server over stdio so that
    MCP clients can analyze positions and generate definitions.
    """
    from defgen.mcp_server import main

    asyncio.run(main())


def _version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"defgen version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log what defgen decides"),
):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
