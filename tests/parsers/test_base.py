import pytest

from defgen.models import FunctionScope, TextRange
from defgen.parsers.base import BaseParser


def test_cannot_instantiate_base_parser():
    with pytest.raises(TypeError) as exc_info:
        BaseParser()

    assert "abstract" in str(exc_info.value).lower()


def test_subclass_must_implement_scope_queries():
    class IncompleteParser(BaseParser):
        pass

    with pytest.raises(TypeError) as exc_info:
        IncompleteParser()

    assert "enclosing_function" in str(exc_info.value)


class FixedParser(BaseParser):
    """Parser that reports the same function everywhere, and no class."""

    FUNCTION = FunctionScope(
        name="f",
        extent=TextRange(0, 20),
        header=TextRange(0, 8),
        parameters=TextRange(5, 8),
        indent="",
    )

    def enclosing_function(self, source, offset):
        return self.FUNCTION

    def enclosing_class(self, source, offset):
        return None

    def find_class(self, source, name):
        return None

    def find_definition(self, source, name, class_scope=None):
        return None

    def module_layout(self, source):
        raise NotImplementedError

    def enclosing_statement(self, source, offset):
        return TextRange(0, 0)


def test_scope_predicates_use_scope_queries():
    parser = FixedParser()

    assert parser.is_inside_function_scope("", 0) is True
    assert parser.is_inside_class_scope("", 0) is False


def test_header_range_comes_from_enclosing_function():
    parser = FixedParser()

    assert parser.enclosing_definition_header_range("", 0) == TextRange(0, 8)
