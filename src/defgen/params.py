"""Inserting and removing single parameters in a parameter list.

Parameters are kept in canonical order: the implicit receiver first, then
positional parameters, then keyword parameters (``name=value``), then
variadic markers (``*args``, ``**kwargs``). Keyword-only parameters that
already follow ``*args`` stay where they are.
"""

from dataclasses import dataclass

from defgen.errors import ArgumentNotFound, DuplicateArgument, MalformedDefinition
from defgen.models import Argument, ParameterOrderClass, TextRange
from defgen.scanner import argument_spans, order_class, parse_definition_argument


@dataclass(frozen=True)
class _Slot:
    argument: Argument
    span: TextRange  # Within the text between the parentheses


def _inner(parameter_list: str) -> str:
    if not (parameter_list.startswith("(") and parameter_list.endswith(")")):
        raise MalformedDefinition(f"Not a parenthesized parameter list: {parameter_list!r}")
    return parameter_list[1:-1]


def _slots(inner: str) -> list[_Slot]:
    return [_Slot(parse_definition_argument(span.slice(inner)), span) for span in argument_spans(inner)]


def insertion_index(slots: list[_Slot], argument: Argument, receiver: str = "self") -> int:
    """Index among the existing slots where the new parameter belongs."""
    classes = [order_class(slot.argument, receiver) for slot in slots]
    new_class = order_class(argument, receiver)
    double_star = next(
        (index for index, slot in enumerate(slots) if slot.argument.name.startswith("**")),
        len(slots),
    )

    if new_class is ParameterOrderClass.IMPLICIT:
        return 0

    if new_class is ParameterOrderClass.POSITIONAL:
        return next(
            (index for index, kind in enumerate(classes) if kind >= ParameterOrderClass.KEYWORD),
            len(slots),
        )

    if new_class is ParameterOrderClass.KEYWORD:
        keywords = [index for index, kind in enumerate(classes) if kind is ParameterOrderClass.KEYWORD]
        if keywords:
            return min(keywords[-1] + 1, double_star)
        return next(
            (index for index, kind in enumerate(classes) if kind is ParameterOrderClass.VARIADIC),
            len(slots),
        )

    if argument.name.startswith("**"):
        return len(slots)
    return double_star


def insert_parameter(parameter_list: str, argument: Argument, receiver: str = "self") -> str:
    """Insert one parameter into a parenthesized parameter list.

    Args:
        parameter_list: Source text of the list, parentheses included
        argument: Parameter to insert. A default of "" renders as "name=".
        receiver: Name of the implicit receiver parameter

    Returns:
        The updated parameter list text.

    Raises:
        DuplicateArgument: If the name (case-insensitive) is already present
        MalformedDefinition: If the existing list cannot be parsed

    Examples:
        >>> insert_parameter("(a, *args)", Argument("x", ""))
        '(a, x=, *args)'
        >>> insert_parameter("(x, y)", Argument("self"))
        '(self, x, y)'
    """
    inner = _inner(parameter_list)
    slots = _slots(inner)

    for slot in slots:
        if slot.argument.matches(argument.name):
            raise DuplicateArgument(f"Parameter '{argument.bare_name}' already exists")

    token = argument.render()
    if not slots:
        return f"({token}{inner})"

    index = insertion_index(slots, argument, receiver)
    if index < len(slots):
        at = slots[index].span.start
        inner = inner[:at] + token + ", " + inner[at:]
    else:
        at = slots[-1].span.end
        inner = inner[:at] + ", " + token + inner[at:]
    return f"({inner})"


def remove_parameter(parameter_list: str, name: str) -> str:
    """Remove one parameter, and the comma separating it, from a parameter list.

    The comma between the parameter and the next one goes with it; the last
    parameter takes the comma before it instead. A trailing comma after the
    last parameter is left alone, so removal exactly undoes insertion.

    Raises:
        ArgumentNotFound: If no parameter has that name (case-insensitive)
        MalformedDefinition: If the existing list cannot be parsed
    """
    inner = _inner(parameter_list)
    slots = _slots(inner)

    index = next((i for i, slot in enumerate(slots) if slot.argument.matches(name)), None)
    if index is None:
        raise ArgumentNotFound(f"No parameter named '{name.lstrip('*')}'")

    span = slots[index].span
    if index + 1 < len(slots):
        start, end = span.start, slots[index + 1].span.start
    elif index > 0:
        start, end = slots[index - 1].span.end, span.end
    else:
        start, end = span.start, span.end
        rest = inner[end:]
        if rest.strip().startswith(","):
            end += rest.index(",") + 1
    return f"({inner[:start]}{inner[end:]})"
