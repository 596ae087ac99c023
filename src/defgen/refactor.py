"""Small refactors: the receiver qualifier, extracted bindings, decorators."""

import keyword

from defgen.analyzer import analyze, parent_text
from defgen.commands import enclosing_function
from defgen.context import CommandContext
from defgen.errors import EmptyBindingName, NoSymbolAtPoint, NotInClassScope, PromptCancelled
from defgen.models import TextRange


def toggle_qualifier(ctx: CommandContext) -> str:
    """Add or strip the receiver qualifier on the symbol at point.

    ``self.name`` becomes ``name`` (with the cursor on either part), and a
    bare ``name`` inside a class body becomes ``self.name``.

    Returns:
        The symbol as it reads afterwards.

    Raises:
        NoSymbolAtPoint: If no identifier is under the cursor, it is the
            bare receiver, or it is qualified by something other than the
            receiver
        NotInClassScope: If a bare name is outside any class
    """
    buffer = ctx.buffer
    source = buffer.text
    receiver = ctx.config.receiver
    descriptor = analyze(source, buffer.current_offset())
    name = descriptor.name
    if not name.isidentifier() or keyword.iskeyword(name):
        raise NoSymbolAtPoint("No symbol at point")

    parent = parent_text(source, descriptor)
    if parent == receiver:
        buffer.delete_range(TextRange(descriptor.parent_range.start, descriptor.range.start))
        return name

    if name == receiver:
        if source[descriptor.range.end:descriptor.range.end + 1] != ".":
            raise NoSymbolAtPoint(f"'{receiver}' is not followed by an attribute")
        qualified = analyze(source, descriptor.range.end + 1)
        buffer.delete_range(TextRange(descriptor.range.start, descriptor.range.end + 1))
        return qualified.name

    if parent is not None:
        raise NoSymbolAtPoint(f"'{name}' is qualified by '{parent}', not '{receiver}'")

    if not ctx.parser.is_inside_class_scope(source, descriptor.range.start):
        raise NotInClassScope(f"Cannot qualify '{name}' with '{receiver}' outside a class")

    buffer.insert_at(descriptor.range.start, f"{receiver}.")
    return f"{receiver}.{name}"


def extract_binding(ctx: CommandContext, selection: TextRange | None = None) -> str:
    """Move the selected expression into a new named binding.

    The selection (or the buffer's marked region) is replaced by a prompted
    name, and ``name = <selected text>`` is inserted as a new statement
    directly above the enclosing statement, at its indentation.

    Returns:
        The binding name.

    Raises:
        NoSymbolAtPoint: If nothing is selected
        PromptCancelled: If the name prompt is cancelled
        EmptyBindingName: If the given name is blank
    """
    buffer = ctx.buffer
    selection = selection or buffer.region
    if selection is None or selection.is_empty:
        raise NoSymbolAtPoint("Nothing selected to extract")

    expression = buffer.read_range(selection)
    answer = ctx.prompt.prompt_string("Binding name")
    if answer is None:
        raise PromptCancelled("Extraction cancelled")
    name = answer.strip()
    if not name:
        raise EmptyBindingName("Binding name cannot be blank")

    statement = ctx.parser.enclosing_statement(buffer.text, selection.start)
    line_start = buffer.line_start_offset(statement.start)
    indent = buffer.line_indentation(statement.start)

    buffer.replace_range(selection, name)
    buffer.insert_at(line_start, f"{indent}{name} = {expression}\n")
    return name


def insert_decorator(ctx: CommandContext, decorator: str | None = None) -> str:
    """Add a decorator line directly above the enclosing function's def line.

    Existing decorators stay above the new one. The decorator is prompted
    for when not given.

    Returns:
        The decorator line as inserted, without indentation.
    """
    function = enclosing_function(ctx)
    if decorator is None:
        decorator = ctx.prompt.prompt_string("Decorator")
    if decorator is None or not decorator.strip().lstrip("@"):
        raise PromptCancelled("No decorator given")

    line = f"@{decorator.strip().lstrip('@')}"
    def_line = ctx.buffer.line_start_offset(function.header.start)
    ctx.buffer.insert_at(def_line, f"{function.indent}{line}\n")
    return line
