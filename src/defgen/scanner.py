"""Lexical scanning of partial expressions and argument lists.

Nothing in this module parses Python properly. Everything works on raw text,
with one balanced scanner for brackets and string literals, so it keeps
working on code that is still being typed.
"""

import re
import string

from defgen.errors import MalformedDefinition
from defgen.models import Argument, ParameterOrderClass, TextRange

NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_QUOTES = ("'", '"')
_NAME_RUN = re.compile(r"[A-Za-z0-9_*]+")


def _string_end(text: str, offset: int) -> int | None:
    """Return the offset just past the string literal starting at offset."""
    quote = text[offset]
    delimiter = quote * 3 if text.startswith(quote * 3, offset) else quote
    index = offset + len(delimiter)
    while index < len(text):
        if text[index] == "\\":
            index += 2
            continue
        if text.startswith(delimiter, index):
            return index + len(delimiter)
        if text[index] == "\n" and len(delimiter) == 1:
            return None
        index += 1
    return None


def matching_bracket_end(text: str, offset: int) -> int | None:
    """Find the end of the bracketed or quoted region opening at offset.

    Brackets of all three kinds may nest inside each other, and string
    literals (single, double, or triple quoted, with backslash escapes) are
    skipped as a whole, so brackets and commas inside them are ignored.

    Args:
        text: Text to scan
        offset: Index of an opening bracket or quote character

    Returns:
        Offset just past the matching close, or None if the region is
        unbalanced or unterminated.

    Raises:
        ValueError: If text[offset] is not a bracket or quote
    """
    if offset >= len(text):
        return None

    opener = text[offset]
    if opener in _QUOTES:
        return _string_end(text, offset)
    if opener not in _OPENERS:
        raise ValueError(f"No opening bracket or quote at offset {offset}: {opener!r}")

    stack = [_OPENERS[opener]]
    index = offset + 1
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            end = _string_end(text, index)
            if end is None:
                return None
            index = end
            continue
        if char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            if char != stack[-1]:
                return None
            stack.pop()
            if not stack:
                return index + 1
        index += 1

    return None


def _iter_top_level(text: str):
    """Yield (index, char) for characters outside any nested region."""
    index = 0
    while index < len(text):
        char = text[index]
        if char in _OPENERS or char in _QUOTES:
            end = matching_bracket_end(text, index)
            if end is None:
                # The rest of the text is an unterminated nested region
                return
            index = end
            continue
        yield index, char
        index += 1


def _line_end(text: str, offset: int) -> int:
    newline = text.find("\n", offset)
    return len(text) if newline < 0 else newline


def find_expression_bounds(source: str, offset: int) -> TextRange:
    """Find the partial expression touching a cursor offset.

    The range covers the identifier under the cursor plus the parenthesized
    call suffix that directly follows it. It stops at a qualification dot, so
    ``self`` in ``self.save(x)`` is the parent of the ``save(x)`` range and is
    found separately. Up to two leading stars are kept when they start a
    token, as in ``*args``.

    Args:
        source: Full source text
        offset: Cursor offset (0 <= offset <= len(source))

    Returns:
        The expression range. Empty only when nothing identifier-like touches
        the cursor, and always (0, 0) for an empty source.
    """
    if not source:
        return TextRange(0, 0)

    offset = max(0, min(offset, len(source)))

    # A cursor sitting on a boundary in front of a token steps onto it
    at_boundary = offset == 0 or source[offset - 1] not in NAME_CHARS | {".", "*"}
    if at_boundary and offset < len(source) and (source[offset] in NAME_CHARS or source[offset] == "*"):
        offset += 1

    start = offset
    while start > 0 and source[start - 1] in NAME_CHARS:
        start -= 1
    stars = 0
    while stars < 2 and start - stars > 0 and source[start - stars - 1] == "*":
        stars += 1
    if stars and (start - stars == 0 or source[start - stars - 1] not in NAME_CHARS):
        start -= stars

    end = offset
    while end < len(source) and source[end] in NAME_CHARS:
        end += 1

    if end > start and end < len(source) and source[end] == "(":
        close = matching_bracket_end(source, end)
        end = close if close is not None else _line_end(source, end)
    return TextRange(start, end)


def argument_spans(text: str) -> list[TextRange]:
    """Split an argument list on top-level commas.

    Returns:
        Whitespace-trimmed ranges of the non-empty segments, in order.
    """
    if not text.strip():
        return []

    bounds = [-1]
    bounds.extend(index for index, char in _iter_top_level(text) if char == ",")
    bounds.append(len(text))

    spans = []
    for left, right in zip(bounds, bounds[1:]):
        start, end = left + 1, right
        while start < end and text[start].isspace():
            start += 1
        while end > start and text[end - 1].isspace():
            end -= 1
        if end > start:
            spans.append(TextRange(start, end))
    return spans


def split_arguments(text: str) -> list[str]:
    """Split an argument string into its top-level arguments.

    Examples:
        >>> split_arguments("a, b, c")
        ['a', 'b', 'c']
        >>> split_arguments("f(a,b), c")
        ['f(a,b)', 'c']
        >>> split_arguments("")
        []
    """
    return [span.slice(text) for span in argument_spans(text)]


def _split_default(text: str) -> tuple[str, str | None]:
    """Split "name=value" on the first top-level assignment "=".

    Comparison operators (==, !=, <=, >=) and the walrus operator are not
    assignments.
    """
    for index, char in _iter_top_level(text):
        if char != "=":
            continue
        before = text[index - 1] if index > 0 else ""
        after = text[index + 1] if index + 1 < len(text) else ""
        if (before and before in "=!<>:") or after == "=":
            continue
        return text[:index], text[index + 1:].strip()
    return text, None


def parse_single_argument(text: str) -> Argument | None:
    """Parse one call-site argument into an Argument.

    The name is the first run of identifier characters (stars included).
    Arguments made only of punctuation still occupied a slot in the call, so
    they come back with the placeholder name "_".

    Returns:
        The parsed Argument, or None for empty or blank text.
    """
    if not text or not text.strip():
        return None

    name_part, default = _split_default(text)
    match = _NAME_RUN.search(name_part)
    if match is None:
        return Argument("_")
    return Argument(match.group(0), default)


def parse_definition_argument(segment: str) -> Argument:
    """Parse one parameter of an existing definition.

    Annotations are tolerated ("x: int = 1" gives name "x", default "1") and
    the bare "/" positional-only marker is kept as is.

    Raises:
        MalformedDefinition: If the segment has no identifier character at all
    """
    name_part, default = _split_default(segment)
    if name_part.strip() == "/" and default is None:
        return Argument("/")

    match = _NAME_RUN.search(name_part)
    if match is None:
        raise MalformedDefinition(f"Cannot parse parameter: {segment.strip()!r}")
    return Argument(match.group(0), default)


def parse_definition_arguments(text: str) -> list[Argument]:
    """Parse the parameter list of an existing definition (without parentheses).

    Raises:
        MalformedDefinition: If any parameter cannot be parsed
    """
    return [parse_definition_argument(segment) for segment in split_arguments(text)]


def order_class(argument: Argument, receiver: str = "self") -> ParameterOrderClass:
    """Classify a parameter into its canonical ordering bucket."""
    if argument.is_variadic:
        return ParameterOrderClass.VARIADIC
    if argument.default is not None:
        return ParameterOrderClass.KEYWORD
    if argument.name == receiver:
        return ParameterOrderClass.IMPLICIT
    return ParameterOrderClass.POSITIONAL
