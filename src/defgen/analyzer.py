"""Expression analysis at a cursor position."""

import re

from defgen.models import ExpressionDescriptor, TextRange
from defgen.scanner import NAME_CHARS, find_expression_bounds, matching_bracket_end

_LEADING_NAME = re.compile(r"[A-Za-z0-9_*]+")


def has_parent(source: str, bounds: TextRange) -> bool:
    """Check whether the expression is qualified, as in ``parent.name``.

    True only when an identifier character sits directly before a dot that
    sits directly before the expression, with no whitespace in between.
    """
    start = bounds.start
    return start >= 2 and source[start - 1] == "." and source[start - 2] in NAME_CHARS


def parent_range(source: str, bounds: TextRange) -> TextRange | None:
    """Return the bounds of the qualifying parent, or None if unqualified."""
    if not has_parent(source, bounds):
        return None
    return find_expression_bounds(source, bounds.start - 1)


def analyze(source: str, offset: int) -> ExpressionDescriptor:
    """Describe the partial expression under the cursor.

    Args:
        source: Full source text
        offset: Cursor offset

    Returns:
        ExpressionDescriptor with the expression's bounds, its name, the raw
        text between its call parentheses (None without a call), and its
        qualifying parent if there is one. The name is empty when nothing
        identifier-like is under the cursor.
    """
    bounds = find_expression_bounds(source, offset)
    text = bounds.slice(source)

    paren = text.find("(")
    head = text if paren < 0 else text[:paren]
    match = _LEADING_NAME.match(head)
    name = match.group(0) if match else ""

    raw_arguments = None
    if paren >= 0:
        close = matching_bracket_end(text, paren)
        raw_arguments = text[paren + 1:close - 1] if close is not None else text[paren + 1:]

    parent = parent_range(source, bounds)
    return ExpressionDescriptor(
        range=bounds,
        name=name,
        raw_arguments=raw_arguments,
        has_parent=parent is not None,
        parent_range=parent,
    )


def parent_text(source: str, descriptor: ExpressionDescriptor) -> str | None:
    if descriptor.parent_range is None:
        return None
    return descriptor.parent_range.slice(source)


def is_parent_self(source: str, descriptor: ExpressionDescriptor, receiver: str = "self") -> bool:
    """True iff the qualifying parent is exactly the receiver name."""
    return parent_text(source, descriptor) == receiver
