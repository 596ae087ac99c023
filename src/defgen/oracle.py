"""Answers "is this symbol already defined?" through navigation."""

import logging
from enum import Enum

from defgen.buffer import SourceBuffer
from defgen.models import ClassScope, ExpressionDescriptor
from defgen.navigation import Found, Navigator, NotFound
from defgen.parsers.base import BaseParser

logger = logging.getLogger(__name__)


class Existence(str, Enum):
    EXISTS = "exists"
    MISSING = "missing"
    AMBIGUOUS = "ambiguous"  # Navigation failed for a reason other than "not found"


def check_existence(
    buffer: SourceBuffer,
    navigator: Navigator,
    descriptor: ExpressionDescriptor
) -> Existence:
    """Check whether the described symbol already resolves to a definition.

    The cursor is back where it started when this returns, whatever the
    navigator did.

    Args:
        buffer: Buffer the navigator moves around in
        navigator: Go-to-definition collaborator
        descriptor: Expression whose name to resolve

    Returns:
        EXISTS or MISSING, or AMBIGUOUS when navigation could not decide.
        AMBIGUOUS is logged as a warning; callers go on as if the symbol
        were missing.
    """
    with buffer.excursion():
        result = navigator.go_to_definition(descriptor.range.start)
        if isinstance(result, Found):
            navigator.go_back()

    if isinstance(result, Found):
        logger.debug(f"'{descriptor.name}' resolves to {result.definition.kind} at {result.definition.extent}")
        return Existence.EXISTS
    if isinstance(result, NotFound):
        return Existence.MISSING

    logger.warning(
        f"Could not tell whether '{descriptor.name}' exists ({result.message}), assuming it does not"
    )
    return Existence.AMBIGUOUS


def resolve_parent_class(
    buffer: SourceBuffer,
    navigator: Navigator,
    parser: BaseParser,
    descriptor: ExpressionDescriptor
) -> ClassScope | None:
    """Find the class the descriptor's parent refers to, as in ``Model.create``.

    Returns:
        ClassScope of the class the parent navigates to, or None if there is
        no parent or it does not resolve to a class.
    """
    if descriptor.parent_range is None:
        return None

    with buffer.excursion():
        result = navigator.go_to_definition(descriptor.parent_range.start)
        if not isinstance(result, Found):
            return None
        navigator.go_back()

    if result.definition.kind != "class":
        return None
    return parser.find_class(buffer.text, result.definition.name)
