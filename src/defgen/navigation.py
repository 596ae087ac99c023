"""Go-to-definition over a single buffer.

Navigation reports its outcome as a typed result instead of raising, so
callers can tell "this name is not defined" apart from "could not work out
where to look".
"""

from dataclasses import dataclass
from typing import Protocol, Union

from defgen.analyzer import analyze
from defgen.buffer import SourceBuffer
from defgen.errors import MalformedDefinition
from defgen.models import Definition
from defgen.parsers.base import BaseParser
from defgen.scanner import parse_definition_arguments


@dataclass(frozen=True)
class Found:
    definition: Definition


@dataclass(frozen=True)
class NotFound:
    message: str


@dataclass(frozen=True)
class NavigationFailure:
    message: str


NavigationResult = Union[Found, NotFound, NavigationFailure]


class Navigator(Protocol):
    def go_to_definition(self, offset: int) -> NavigationResult:
        """Move to the definition of the symbol at offset."""
        ...

    def go_back(self) -> None:
        """Return to where the last successful navigation started."""
        ...


class BufferNavigator:
    """Resolves names against the definitions in the buffer itself.

    Bare names are looked up among the parameters of the enclosing function
    and then at module level. ``self.name`` is looked up in the enclosing
    class and ``Class.name`` in the top-level class of that name. Any other
    parent is an object whose type cannot be known without running the code,
    so navigation fails rather than claiming the name is missing.
    """

    def __init__(self, buffer: SourceBuffer, parser: BaseParser, receiver: str = "self"):
        self.buffer = buffer
        self.parser = parser
        self.receiver = receiver
        self._history: list[int] = []

    def _lookup(self, offset: int) -> NavigationResult:
        source = self.buffer.text
        descriptor = analyze(source, offset)
        name = descriptor.name.lstrip("*")
        if not name:
            return NavigationFailure(f"No symbol at offset {offset}")

        class_scope = None
        if descriptor.has_parent:
            parent = descriptor.parent_range.slice(source)
            if parent == self.receiver:
                class_scope = self.parser.enclosing_class(source, offset)
                if class_scope is None:
                    return NavigationFailure(f"'{self.receiver}' is used outside a class")
            else:
                class_scope = self.parser.find_class(source, parent)
                if class_scope is None:
                    return NavigationFailure(f"Cannot infer the type of '{parent}'")
        else:
            function = self.parser.enclosing_function(source, offset)
            if function is not None:
                try:
                    parameters = parse_definition_arguments(function.parameters.slice(source)[1:-1])
                except MalformedDefinition:
                    parameters = []
                if any(parameter.bare_name == name for parameter in parameters):
                    return Found(Definition(kind="parameter", name=name, extent=function.parameters))

        definition = self.parser.find_definition(source, name, class_scope)
        if definition is None:
            where = f"class {class_scope.name}" if class_scope else "module"
            return NotFound(f"No definition of '{name}' in {where}")
        return Found(definition)

    def go_to_definition(self, offset: int) -> NavigationResult:
        result = self._lookup(offset)
        if isinstance(result, Found):
            self._history.append(self.buffer.current_offset())
            self.buffer.move_to(result.definition.extent.start)
        return result

    def go_back(self) -> None:
        if self._history:
            self.buffer.move_to(self._history.pop())
