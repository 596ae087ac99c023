"""Rendering new definitions and committing them to a buffer."""

import keyword
import re
from dataclasses import dataclass
from typing import Iterable

from defgen.buffer import SourceBuffer
from defgen.models import Argument, InsertionTarget, ScopeKind

_PARAMETER_NAME = re.compile(r"^\*{0,2}[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Rendered:
    """Text of a new definition and where its body starts within that text."""
    text: str
    body_offset: int


def parameter_names(arguments: Iterable[Argument], reserved: Iterable[str] = ()) -> list[Argument]:
    """Turn call-site arguments into usable parameters.

    A name that is not a valid identifier (a literal such as ``42`` or
    ``True``) becomes ``arg<N>`` after its position. Repeated names, compared
    case-insensitively, get a numeric suffix.

    Args:
        arguments: Arguments in call order
        reserved: Names already taken, such as the receiver

    Returns:
        Arguments with valid, distinct names and their defaults kept.
    """
    taken = {name.lower() for name in reserved}
    result = []
    for position, argument in enumerate(arguments, start=1):
        name = argument.name
        if not _PARAMETER_NAME.match(name) or keyword.iskeyword(name.lstrip("*")):
            name = f"arg{position}"

        candidate = name
        suffix = 2
        while candidate.lstrip("*").lower() in taken:
            candidate = f"{name}{suffix}"
            suffix += 1

        taken.add(candidate.lstrip("*").lower())
        result.append(Argument(candidate, argument.default))
    return result


def _with_body(lines: list[str], body_indent: str, placeholder: str) -> Rendered:
    head = "\n".join(lines) + "\n"
    return Rendered(head + body_indent + placeholder + "\n", len(head) + len(body_indent))


def render_function(
    target: InsertionTarget,
    name: str,
    arguments: Iterable[Argument],
    decorators: Iterable[str] = (),
    implicit_receiver: bool = False,
    receiver: str = "self",
    placeholder: str = "",
) -> Rendered:
    """Render a function or method definition.

    Args:
        target: Where the definition goes (its indentation is used)
        name: Function name
        arguments: Parameters, in call order
        decorators: Decorator strings, with or without the leading "@"
        implicit_receiver: Put the receiver first. Only honoured in a class.
        receiver: Receiver name
        placeholder: Body statement, empty for a blank body line

    Returns:
        Rendered definition ending with a newline.
    """
    indent = target.indentation_prefix
    lines = [f"{indent}@{decorator.strip().lstrip('@')}" for decorator in decorators]

    with_receiver = implicit_receiver and target.scope_kind is ScopeKind.CLASS
    parameters = [
        argument.render()
        for argument in parameter_names(arguments, reserved=(receiver,) if with_receiver else ())
    ]
    if with_receiver:
        parameters.insert(0, receiver)

    lines.append(f"{indent}def {name}({', '.join(parameters)}):")
    return _with_body(lines, indent + target.indent_unit, placeholder)


def render_class(
    target: InsertionTarget,
    name: str,
    arguments: Iterable[Argument],
    receiver: str = "self",
    placeholder: str = "",
) -> Rendered:
    """Render a class whose __init__ takes the given arguments."""
    indent = target.indentation_prefix
    unit = target.indent_unit
    parameters = [receiver]
    parameters.extend(argument.render() for argument in parameter_names(arguments, reserved=(receiver,)))

    lines = [
        f"{indent}class {name}():",
        f"{indent}{unit}def __init__({', '.join(parameters)}):",
    ]
    return _with_body(lines, indent + unit + unit, placeholder)


def _trailing_blank_lines(text: str) -> int:
    """Count blank lines at the end of text, which ends with a newline."""
    count = 0
    for line in reversed(text.split("\n")[:-1]):
        if line.strip():
            break
        count += 1
    return count


def insert_definition(
    buffer: SourceBuffer,
    target: InsertionTarget,
    rendered: Rendered,
    module_blank_lines: int = 2,
    class_blank_lines: int = 1,
) -> int:
    """Insert a rendered definition at its target, separated by blank lines.

    A module-level definition gets module_blank_lines above it (counting
    blank lines already there) and below it when code follows. A class
    member is added after the last member with class_blank_lines above it.

    Returns:
        Offset of the start of the new body in the updated buffer.
    """
    source = buffer.text
    anchor = target.anchor_offset

    if target.scope_kind is ScopeKind.CLASS:
        lead = "\n" * (class_blank_lines + 1)
        buffer.insert_at(anchor, lead + rendered.text.rstrip("\n"))
        return anchor + len(lead) + rendered.body_offset

    head = source[:anchor]
    lead = ""
    if head.strip():
        if head.endswith("\n"):
            existing = _trailing_blank_lines(head)
        else:
            lead = "\n"
            existing = 0
        lead += "\n" * max(0, module_blank_lines - existing)
    trail = "\n" * module_blank_lines if source[anchor:].strip() else ""

    buffer.insert_at(anchor, lead + rendered.text + trail)
    return anchor + len(lead) + rendered.body_offset
