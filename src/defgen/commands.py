"""Top-level commands: generating definitions and editing parameter lists.

Each command reads the buffer, validates everything it needs, and only then
edits, so a failing command leaves the buffer as it found it.
"""

import keyword
import logging

from defgen.analyzer import analyze, is_parent_self, parent_text
from defgen.context import CommandContext
from defgen.errors import (
    AlreadyExists,
    ArgumentNotFound,
    NoSymbolAtPoint,
    NotInClassScope,
    NotInDefinitionScope,
)
from defgen.locator import locate_insertion_point
from defgen.models import Argument, DecoratorList, ExpressionDescriptor, FunctionScope
from defgen.oracle import Existence, check_existence, resolve_parent_class
from defgen.params import insert_parameter, remove_parameter as remove_from_list
from defgen.scanner import parse_single_argument, split_arguments
from defgen.synthesizer import insert_definition, render_class, render_function

logger = logging.getLogger(__name__)


def symbol_at_point(ctx: CommandContext) -> ExpressionDescriptor:
    """Analyze the cursor position, requiring an identifier there.

    Leading stars are allowed, so ``*args`` is a symbol and keeps its stars
    in the descriptor.

    Raises:
        NoSymbolAtPoint: If the cursor is not on an identifier
    """
    descriptor = analyze(ctx.buffer.text, ctx.buffer.current_offset())
    bare_name = descriptor.name.lstrip("*")
    if not bare_name.isidentifier() or keyword.iskeyword(bare_name):
        raise NoSymbolAtPoint("No symbol at point")
    return descriptor


def call_arguments(descriptor: ExpressionDescriptor) -> list[Argument]:
    """Arguments at the call site, in order; none when there is no call."""
    if descriptor.raw_arguments is None:
        return []
    arguments = (parse_single_argument(text) for text in split_arguments(descriptor.raw_arguments))
    return [argument for argument in arguments if argument is not None]


def _require_missing(ctx: CommandContext, descriptor: ExpressionDescriptor) -> None:
    existence = check_existence(ctx.buffer, ctx.navigator, descriptor)
    if existence is Existence.EXISTS:
        raise AlreadyExists(f"'{descriptor.name.lstrip('*')}' is already defined")


def generate_function(
    ctx: CommandContext,
    static: bool = False,
    decorators: DecoratorList | None = None
) -> int:
    """Generate a function or method for the symbol at point.

    ``name(...)`` becomes a module-level function, ``self.name(...)`` a method
    of the enclosing class, and ``Class.name(...)`` a static method of that
    class. The call's arguments become the parameters.

    Args:
        ctx: Command context
        static: Generate a static method (no receiver) when the target is a class
        decorators: Extra decorator lines for the new definition

    Returns:
        Offset of the new body, where the cursor is left.

    Raises:
        NoSymbolAtPoint: If the cursor is not on an identifier
        AlreadyExists: If the name already resolves to a definition
        NotInClassScope: If the parent is self outside a class, or names no class
    """
    source = ctx.buffer.text
    config = ctx.config
    descriptor = symbol_at_point(ctx)
    name = descriptor.name.lstrip("*")
    _require_missing(ctx, descriptor)

    decorators = list(decorators or [])
    class_scope = None
    if descriptor.has_parent:
        if is_parent_self(source, descriptor, config.receiver):
            class_scope = ctx.parser.enclosing_class(source, descriptor.range.start)
            if class_scope is None:
                raise NotInClassScope(f"'{config.receiver}.{name}' is not inside a class")
        else:
            class_scope = resolve_parent_class(ctx.buffer, ctx.navigator, ctx.parser, descriptor)
            if class_scope is None:
                raise NotInClassScope(f"'{parent_text(source, descriptor)}' does not name a class in this file")
            static = True

    if class_scope is not None and static:
        decorators.insert(0, config.static_decorator)

    target = locate_insertion_point(source, ctx.parser, class_scope, config.indent_unit)
    rendered = render_function(
        target,
        name,
        call_arguments(descriptor),
        decorators=decorators,
        implicit_receiver=class_scope is not None and not static,
        receiver=config.receiver,
        placeholder=config.body_placeholder,
    )
    body = insert_definition(
        ctx.buffer, target, rendered, config.module_blank_lines, config.class_blank_lines
    )
    ctx.buffer.move_to(body)
    logger.debug(f"Generated {name} with body at offset {body}")
    return body


def generate_static_function(ctx: CommandContext) -> int:
    return generate_function(ctx, static=True)


def generate_class(ctx: CommandContext) -> int:
    """Generate a module-level class for the symbol at point.

    The call's arguments, as in ``Point(x, y)``, become the parameters of
    the class's __init__.

    Returns:
        Offset of the new __init__ body, where the cursor is left.
    """
    source = ctx.buffer.text
    config = ctx.config
    descriptor = symbol_at_point(ctx)
    name = descriptor.name.lstrip("*")
    _require_missing(ctx, descriptor)

    target = locate_insertion_point(source, ctx.parser, None, config.indent_unit)
    rendered = render_class(
        target,
        name,
        call_arguments(descriptor),
        receiver=config.receiver,
        placeholder=config.body_placeholder,
    )
    body = insert_definition(
        ctx.buffer, target, rendered, config.module_blank_lines, config.class_blank_lines
    )
    ctx.buffer.move_to(body)
    return body


def enclosing_function(ctx: CommandContext) -> FunctionScope:
    """The function around the cursor.

    Raises:
        NotInDefinitionScope: If the cursor is not inside a function
    """
    function = ctx.parser.enclosing_function(ctx.buffer.text, ctx.buffer.current_offset())
    if function is None:
        raise NotInDefinitionScope("Not inside a function definition")
    return function


def add_parameter(ctx: CommandContext, keyword_argument: bool = False, name: str | None = None) -> str:
    """Add a parameter to the enclosing function's parameter list.

    The name is the symbol at point unless given. A keyword parameter is
    added as ``name=`` for the user to fill in the default.

    Returns:
        The updated parameter list.
    """
    source = ctx.buffer.text
    function = enclosing_function(ctx)
    if name is None:
        name = symbol_at_point(ctx).name

    argument = Argument(name, "" if keyword_argument else None)
    updated = insert_parameter(function.parameters.slice(source), argument, ctx.config.receiver)
    ctx.buffer.replace_range(function.parameters, updated)
    return updated


def remove_parameter(ctx: CommandContext, name: str | None = None) -> str:
    """Remove a parameter (the symbol at point unless given) from the enclosing function."""
    source = ctx.buffer.text
    function = enclosing_function(ctx)
    if name is None:
        name = symbol_at_point(ctx).name

    updated = remove_from_list(function.parameters.slice(source), name)
    ctx.buffer.replace_range(function.parameters, updated)
    return updated


def add_receiver(ctx: CommandContext) -> str:
    """Make the receiver the first parameter of the enclosing function."""
    return add_parameter(ctx, name=ctx.config.receiver)


def remove_receiver(ctx: CommandContext) -> str:
    return remove_parameter(ctx, name=ctx.config.receiver)


def make_static(ctx: CommandContext) -> str:
    """Turn the enclosing method into a static method.

    Drops the receiver parameter if there is one and adds the static
    decorator directly above the ``def`` line.

    Raises:
        NotInDefinitionScope: If the cursor is not inside a function
        NotInClassScope: If the function is not a method
        AlreadyExists: If the method already has the static decorator
    """
    source = ctx.buffer.text
    config = ctx.config
    function = enclosing_function(ctx)
    if not function.in_class:
        raise NotInClassScope(f"'{function.name}' is not a method")

    def_line = ctx.buffer.line_start_offset(function.header.start)
    existing = source[function.extent.start:def_line].splitlines()
    marker = f"@{config.static_decorator}"
    if any(line.strip() == marker for line in existing):
        raise AlreadyExists(f"'{function.name}' is already static")

    parameter_list = function.parameters.slice(source)
    try:
        updated = remove_from_list(parameter_list, config.receiver)
    except ArgumentNotFound:
        updated = parameter_list

    ctx.buffer.replace_range(function.parameters, updated)
    ctx.buffer.insert_at(def_line, f"{function.indent}{marker}\n")
    return updated


def remove_call_site_parameter(ctx: CommandContext) -> None:
    """Drop a parameter of an existing definition because a call no longer passes it.

    Not implemented: removing a parameter affects every other call site of
    the definition, which needs its own design.
    """
    raise NotImplementedError("Removing parameters from an existing definition's call sites is not supported")
