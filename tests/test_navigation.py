import logging

from defgen.analyzer import analyze
from defgen.buffer import SourceBuffer
from defgen.navigation import BufferNavigator, Found, NavigationFailure, NotFound
from defgen.oracle import Existence, check_existence, resolve_parent_class
from defgen.parsers.python_parser import PythonParser

SOURCE = """import os


class Store:
    def save(self, record):
        self.flush()
        return record

    def flush(self):
        pass


def main(store):
    store.save(1)
    Store.create()
    helper()
    os.getcwd()
"""


def make_navigator(offset: int = 0):
    buffer = SourceBuffer(SOURCE, offset)
    parser = PythonParser()
    return buffer, parser, BufferNavigator(buffer, parser)


class TestBufferNavigator:
    """Tests for go-to-definition within one buffer."""

    def test_method_through_self(self):
        start = SOURCE.index("flush()") + 1
        buffer, _parser, navigator = make_navigator(start)

        result = navigator.go_to_definition(start)

        assert isinstance(result, Found)
        assert result.definition.kind == "method"
        assert buffer.current_offset() == SOURCE.index("def flush")

    def test_go_back_returns_to_start(self):
        start = SOURCE.index("flush()") + 1
        buffer, _parser, navigator = make_navigator(start)

        navigator.go_to_definition(start)
        navigator.go_back()

        assert buffer.current_offset() == start

    def test_go_back_without_history_is_a_no_op(self):
        buffer, _parser, navigator = make_navigator(7)

        navigator.go_back()

        assert buffer.current_offset() == 7

    def test_undefined_name(self):
        start = SOURCE.index("helper")
        buffer, _parser, navigator = make_navigator(start)

        result = navigator.go_to_definition(start)

        assert isinstance(result, NotFound)
        assert "helper" in result.message
        assert buffer.current_offset() == start

    def test_parameter(self):
        start = SOURCE.index("return record") + len("return r")
        _buffer, _parser, navigator = make_navigator(start)

        result = navigator.go_to_definition(start)

        assert isinstance(result, Found)
        assert result.definition.kind == "parameter"

    def test_import(self):
        start = SOURCE.index("os.getcwd")
        _buffer, _parser, navigator = make_navigator(start)

        result = navigator.go_to_definition(start)

        assert isinstance(result, Found)
        assert result.definition.kind == "import"

    def test_unknown_parent_type_fails(self):
        start = SOURCE.index("save(1)")
        _buffer, _parser, navigator = make_navigator(start)

        result = navigator.go_to_definition(start)

        assert isinstance(result, NavigationFailure)
        assert "store" in result.message

    def test_missing_member_of_known_class(self):
        start = SOURCE.index("create")
        _buffer, _parser, navigator = make_navigator(start)

        result = navigator.go_to_definition(start)

        assert isinstance(result, NotFound)
        assert "class Store" in result.message

    def test_no_symbol(self):
        source = "x = (  )\n"
        buffer = SourceBuffer(source)
        navigator = BufferNavigator(buffer, PythonParser())

        assert isinstance(navigator.go_to_definition(6), NavigationFailure)


class TestOracle:
    """Tests for existence checks and parent class resolution."""

    def test_missing_leaves_cursor_unchanged(self):
        start = SOURCE.index("helper") + 2
        buffer, _parser, navigator = make_navigator(start)

        existence = check_existence(buffer, navigator, analyze(SOURCE, start))

        assert existence is Existence.MISSING
        assert buffer.current_offset() == start

    def test_exists_leaves_cursor_unchanged(self):
        start = SOURCE.index("flush()") + 2
        buffer, _parser, navigator = make_navigator(start)

        existence = check_existence(buffer, navigator, analyze(SOURCE, start))

        assert existence is Existence.EXISTS
        assert buffer.current_offset() == start

    def test_ambiguous_is_logged(self, caplog):
        start = SOURCE.index("save(1)") + 1
        buffer, _parser, navigator = make_navigator(start)

        with caplog.at_level(logging.WARNING, logger="defgen.oracle"):
            existence = check_existence(buffer, navigator, analyze(SOURCE, start))

        assert existence is Existence.AMBIGUOUS
        assert "Could not tell whether 'save' exists" in caplog.text
        assert buffer.current_offset() == start

    def test_resolve_parent_class(self):
        start = SOURCE.index("create") + 1
        buffer, parser, navigator = make_navigator(start)

        scope = resolve_parent_class(buffer, navigator, parser, analyze(SOURCE, start))

        assert scope is not None
        assert scope.name == "Store"
        assert buffer.current_offset() == start

    def test_resolve_parent_that_is_not_a_class(self):
        start = SOURCE.index("getcwd") + 1
        buffer, parser, navigator = make_navigator(start)

        assert resolve_parent_class(buffer, navigator, parser, analyze(SOURCE, start)) is None

    def test_resolve_without_parent(self):
        start = SOURCE.index("helper") + 1
        buffer, parser, navigator = make_navigator(start)

        assert resolve_parent_class(buffer, navigator, parser, analyze(SOURCE, start)) is None
