from abc import ABC, abstractmethod

from defgen.models import ClassScope, Definition, FunctionScope, ModuleLayout, TextRange


class BaseParser(ABC):
    """Abstract base class for language-specific scope queries."""

    @abstractmethod
    def enclosing_function(self, source: str, offset: int) -> FunctionScope | None:
        """Find the innermost function or method definition containing offset.

        Args:
            source: The source code to query
            offset: Character offset into source

        Returns:
            FunctionScope, or None if offset is not inside a function
        """
        pass

    @abstractmethod
    def enclosing_class(self, source: str, offset: int) -> ClassScope | None:
        """Find the innermost class definition containing offset."""
        pass

    @abstractmethod
    def find_class(self, source: str, name: str) -> ClassScope | None:
        """Find a top-level class by name."""
        pass

    @abstractmethod
    def find_definition(
        self,
        source: str,
        name: str,
        class_scope: ClassScope | None = None
    ) -> Definition | None:
        """Find what a name is bound to at module level, or inside a class body."""
        pass

    @abstractmethod
    def module_layout(self, source: str) -> ModuleLayout:
        """Locate the top-level landmarks used to place new definitions."""
        pass

    @abstractmethod
    def enclosing_statement(self, source: str, offset: int) -> TextRange:
        """Find the innermost whole statement containing offset."""
        pass

    def is_inside_function_scope(self, source: str, offset: int) -> bool:
        return self.enclosing_function(source, offset) is not None

    def is_inside_class_scope(self, source: str, offset: int) -> bool:
        return self.enclosing_class(source, offset) is not None

    def enclosing_definition_header_range(self, source: str, offset: int) -> TextRange | None:
        function = self.enclosing_function(source, offset)
        return function.header if function is not None else None
