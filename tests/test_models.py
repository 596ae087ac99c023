from dataclasses import asdict

import pytest

from defgen.models import Argument, ClassScope, ExpressionDescriptor, ParameterOrderClass, TextRange


def test_text_range_creation():
    text_range = TextRange(start=10, end=20)
    assert text_range.start == 10
    assert text_range.end == 20
    assert text_range.length == 10
    assert text_range.is_empty is False


def test_text_range_rejects_reversed_bounds():
    with pytest.raises(ValueError, match="Invalid range"):
        TextRange(5, 2)


def test_text_range_contains_is_half_open():
    text_range = TextRange(2, 4)
    assert text_range.contains(2)
    assert text_range.contains(3)
    assert not text_range.contains(4)


def test_text_range_slice():
    assert TextRange(4, 9).slice("def hello():") == "hello"


def test_descriptor_to_dict_for_json_output():
    descriptor = ExpressionDescriptor(
        range=TextRange(5, 12),
        name="save",
        raw_arguments="x",
        has_parent=True,
        parent_range=TextRange(0, 4),
    )

    assert asdict(descriptor) == {
        "range": {"start": 5, "end": 12},
        "name": "save",
        "raw_arguments": "x",
        "has_parent": True,
        "parent_range": {"start": 0, "end": 4},
    }


def test_argument_render():
    assert Argument("a").render() == "a"
    assert Argument("b", "1").render() == "b=1"
    assert Argument("c", "").render() == "c="


def test_argument_matches_ignores_case_and_stars():
    argument = Argument("**Options")
    assert argument.is_variadic
    assert argument.bare_name == "Options"
    assert argument.matches("options")
    assert argument.matches("*options")
    assert not argument.matches("option")


def test_order_class_compares_as_int():
    assert sorted([ParameterOrderClass.VARIADIC, ParameterOrderClass.IMPLICIT]) == [
        ParameterOrderClass.IMPLICIT,
        ParameterOrderClass.VARIADIC,
    ]


def test_class_scope_indent_unit():
    scope = ClassScope(
        name="A",
        extent=TextRange(0, 10),
        header_start=0,
        header_indent="    ",
        body_indent="      ",
        body_end=10,
    )
    assert scope.indent_unit == "  "


def test_class_scope_indent_unit_unknown():
    scope = ClassScope(
        name="A",
        extent=TextRange(0, 10),
        header_start=0,
        header_indent="\t",
        body_indent="    ",
        body_end=10,
    )
    assert scope.indent_unit == ""
