from dataclasses import dataclass
from enum import Enum, IntEnum


@dataclass(frozen=True)
class TextRange:
    """Half-open character range [start, end) into a source snapshot."""
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Invalid range: start {self.start} > end {self.end}")

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


@dataclass(frozen=True)
class ExpressionDescriptor:
    """The partial expression found at a cursor position."""
    range: TextRange
    name: str
    raw_arguments: str | None = None  # None if no parentheses follow the name
    has_parent: bool = False
    parent_range: TextRange | None = None  # Ends at range.start - 1, before the dot


@dataclass(frozen=True)
class Argument:
    """A single parameter or call-site argument."""
    name: str
    default: str | None = None  # None if there is no "=", "" renders as "name="

    @property
    def bare_name(self) -> str:
        """Name without any leading variadic stars."""
        return self.name.lstrip("*")

    @property
    def is_variadic(self) -> bool:
        return self.name.startswith("*")

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison, ignoring variadic stars."""
        return self.bare_name.lower() == name.lstrip("*").lower()

    def render(self) -> str:
        if self.default is None:
            return self.name
        return f"{self.name}={self.default}"


class ParameterOrderClass(IntEnum):
    """Canonical order of parameter kinds within a parameter list."""
    IMPLICIT = 0
    POSITIONAL = 1
    KEYWORD = 2
    VARIADIC = 3


class ScopeKind(str, Enum):
    MODULE = "module"
    CLASS = "class"


@dataclass(frozen=True)
class InsertionTarget:
    """Where and at what indentation a new definition goes."""
    scope_kind: ScopeKind
    anchor_offset: int
    indentation_prefix: str
    indent_unit: str = "    "


# Raw decorator strings, applied top-to-bottom above the definition line
DecoratorList = list[str]


@dataclass(frozen=True)
class Definition:
    """Something a name resolves to: a function, class, method, variable, import, or parameter."""
    kind: str
    name: str
    extent: TextRange  # Includes decorators


@dataclass(frozen=True)
class ClassScope:
    """A class definition and the layout of its body."""
    name: str
    extent: TextRange  # Includes decorators
    header_start: int  # Offset of the "class" keyword
    header_indent: str
    body_indent: str  # Literal whitespace prefix of the first body statement
    body_end: int  # End of the line holding the last body statement

    @property
    def indent_unit(self) -> str:
        """One indentation level as written in this class, "" if it cannot be told."""
        if self.body_indent.startswith(self.header_indent) and len(self.body_indent) > len(self.header_indent):
            return self.body_indent[len(self.header_indent):]
        return ""


@dataclass(frozen=True)
class FunctionScope:
    """A function or method definition and the parts defgen edits."""
    name: str
    extent: TextRange  # Includes decorators
    header: TextRange  # From "def" up to and including the closing parenthesis
    parameters: TextRange  # The parenthesized parameter list
    indent: str
    in_class: bool = False


@dataclass(frozen=True)
class ModuleLayout:
    """Top-level landmarks used to place module-level definitions."""
    first_class: int | None = None
    first_function: int | None = None
    after_imports: int | None = None  # First statement after the leading import block
    end: int = 0
