"""Choosing where a new definition goes."""

import logging

from defgen.models import ClassScope, InsertionTarget, ScopeKind
from defgen.parsers.base import BaseParser

logger = logging.getLogger(__name__)


def _line_prefix(source: str, offset: int) -> str:
    line_start = source.rfind("\n", 0, offset) + 1
    newline = source.find("\n", line_start)
    line = source[line_start:len(source) if newline < 0 else newline]
    return line[:len(line) - len(line.lstrip(" \t"))]


def locate_insertion_point(
    source: str,
    parser: BaseParser,
    class_scope: ClassScope | None = None,
    indent_unit: str = "    "
) -> InsertionTarget:
    """Decide where a new definition is inserted.

    In a class, the new member goes after the last member of the body, at
    the indentation of the body's statements.

    At module level, in priority order:
    1. before the first top-level class or function, whichever comes first;
    2. before the first statement after the leading import block;
    3. at the end of the buffer.

    Args:
        source: Python source code
        parser: Scope-query parser
        class_scope: Class receiving the definition, or None for module level
        indent_unit: Indentation level used where the source does not show one

    Returns:
        InsertionTarget computed against this exact source
    """
    if class_scope is not None:
        target = InsertionTarget(
            scope_kind=ScopeKind.CLASS,
            anchor_offset=class_scope.body_end,
            indentation_prefix=class_scope.body_indent,
            indent_unit=class_scope.indent_unit or indent_unit,
        )
        logger.debug(f"Inserting into class {class_scope.name} at offset {target.anchor_offset}")
        return target

    layout = parser.module_layout(source)
    candidates = [offset for offset in (layout.first_class, layout.first_function) if offset is not None]
    if candidates:
        anchor = min(candidates)
    elif layout.after_imports is not None:
        anchor = layout.after_imports
    else:
        anchor = len(source)

    logger.debug(f"Inserting at module level at offset {anchor}")
    return InsertionTarget(
        scope_kind=ScopeKind.MODULE,
        anchor_offset=anchor,
        indentation_prefix=_line_prefix(source, anchor) if anchor < len(source) else "",
        indent_unit=indent_unit,
    )
