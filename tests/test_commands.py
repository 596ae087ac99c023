import pytest

from defgen import commands
from defgen.config import GenerateConfig
from defgen.context import CommandContext
from defgen.errors import (
    AlreadyExists,
    ArgumentNotFound,
    DuplicateArgument,
    NoSymbolAtPoint,
    NotInClassScope,
    NotInDefinitionScope,
)


def context_at(source: str, marker: str, shift: int = 1, config: GenerateConfig | None = None):
    return CommandContext.for_source(source, source.index(marker) + shift, config=config)


class TestGenerateFunction:
    """Tests for generating functions and methods from a call."""

    def test_module_function_after_imports(self):
        source = "import os\n\nresult = compute(a, b=2)\n"
        ctx = context_at(source, "compute")

        body = commands.generate_function(ctx)

        assert ctx.buffer.text == (
            "import os\n\n\ndef compute(a, b=2):\n    \n\n\nresult = compute(a, b=2)\n"
        )
        assert ctx.buffer.current_offset() == body
        assert ctx.buffer.text[:body].endswith("def compute(a, b=2):\n    ")

    def test_module_function_before_first_definition(self):
        source = "def main():\n    run(1, name)\n"
        ctx = context_at(source, "run")

        commands.generate_function(ctx)

        assert ctx.buffer.text == "def run(arg1, name):\n    \n\n\ndef main():\n    run(1, name)\n"

    def test_method_through_self(self):
        source = (
            "class Store:\n"
            "    def save(self, record):\n"
            "        self.write(record)\n"
            "\n"
            "store = Store()\n"
        )
        ctx = context_at(source, "write")

        commands.generate_function(ctx)

        assert ctx.buffer.text == (
            "class Store:\n"
            "    def save(self, record):\n"
            "        self.write(record)\n"
            "\n"
            "    def write(self, record):\n"
            "        \n"
            "\n"
            "store = Store()\n"
        )

    def test_static_method_through_self(self):
        source = "class Store:\n    def save(self):\n        self.check(1)\n"
        ctx = context_at(source, "check")

        commands.generate_static_function(ctx)

        assert ctx.buffer.text.endswith("\n\n    @staticmethod\n    def check(arg1):\n        \n")

    def test_method_through_class_name_is_static(self):
        source = "class Store:\n    pass\n\n\ndef main():\n    Store.create(path)\n"
        ctx = context_at(source, "create")

        commands.generate_function(ctx)

        assert ctx.buffer.text.startswith(
            "class Store:\n    pass\n\n    @staticmethod\n    def create(path):\n        \n"
        )

    def test_custom_static_decorator_and_placeholder(self):
        source = "class Store:\n    def save(self):\n        self.check()\n"
        config = GenerateConfig(static_decorator="classmethod", body_placeholder="pass")
        ctx = context_at(source, "check", config=config)

        commands.generate_function(ctx, static=True)

        assert ctx.buffer.text.endswith("    @classmethod\n    def check():\n        pass\n")

    def test_extra_decorators(self):
        source = "run()\n"
        ctx = context_at(source, "run")

        commands.generate_function(ctx, decorators=["cache"])

        assert ctx.buffer.text.startswith("run()\n\n\n@cache\ndef run():\n")

    def test_self_outside_class(self):
        source = "def main(self):\n    self.write()\n"
        ctx = context_at(source, "write")

        with pytest.raises(NotInClassScope):
            commands.generate_function(ctx)
        assert ctx.buffer.text == source

    def test_unknown_parent(self):
        source = "def main(db):\n    db.write()\n"
        ctx = context_at(source, "write")

        with pytest.raises(NotInClassScope, match="'db' does not name a class"):
            commands.generate_function(ctx)

    def test_already_defined(self):
        source = "def run():\n    pass\n\nrun()\n"
        ctx = context_at(source, "\nrun()", shift=2)

        with pytest.raises(AlreadyExists):
            commands.generate_function(ctx)
        assert ctx.buffer.text == source

    def test_no_symbol(self):
        source = "x = (  )\n"
        ctx = CommandContext.for_source(source, 6)

        with pytest.raises(NoSymbolAtPoint):
            commands.generate_function(ctx)

    def test_keyword_is_not_a_symbol(self):
        source = "return\n"
        ctx = CommandContext.for_source(source, 2)

        with pytest.raises(NoSymbolAtPoint):
            commands.generate_function(ctx)


class TestGenerateClass:
    """Tests for generating classes from an instantiation."""

    def test_class_with_init(self):
        source = "import math\n\norigin = Point(0, y)\n"
        ctx = context_at(source, "Point")

        body = commands.generate_class(ctx)

        assert ctx.buffer.text == (
            "import math\n\n\n"
            "class Point():\n"
            "    def __init__(self, arg1, y):\n"
            "        \n"
            "\n\n"
            "origin = Point(0, y)\n"
        )
        assert ctx.buffer.text[:body].endswith("def __init__(self, arg1, y):\n        ")


class TestParameterCommands:
    """Tests for editing the enclosing function's parameters."""

    def test_add_parameter_from_symbol(self):
        source = "def area(width):\n    return width * height\n"
        ctx = context_at(source, "height")

        updated = commands.add_parameter(ctx)

        assert updated == "(width, height)"
        assert ctx.buffer.text == "def area(width, height):\n    return width * height\n"

    def test_add_starred_parameter_from_symbol(self):
        source = "def run(a):\n    return f(*args)\n"
        ctx = context_at(source, "args")

        updated = commands.add_parameter(ctx)

        assert updated == "(a, *args)"
        assert ctx.buffer.text == "def run(a, *args):\n    return f(*args)\n"

    def test_add_keyword_parameter(self):
        source = "def area(width, *rest):\n    return scale\n"
        ctx = context_at(source, "scale")

        commands.add_parameter(ctx, keyword_argument=True)

        assert ctx.buffer.text.startswith("def area(width, scale=, *rest):")

    def test_add_duplicate(self):
        source = "def area(width):\n    return width\n"
        ctx = context_at(source, "return width", shift=8)

        with pytest.raises(DuplicateArgument):
            commands.add_parameter(ctx)

    def test_add_outside_function(self):
        ctx = context_at("value = other\n", "other")

        with pytest.raises(NotInDefinitionScope):
            commands.add_parameter(ctx)

    def test_remove_parameter(self):
        source = "def area(width, height):\n    return width\n"
        ctx = context_at(source, "return")

        commands.remove_parameter(ctx, name="height")

        assert ctx.buffer.text == "def area(width):\n    return width\n"

    def test_remove_missing(self):
        source = "def area(width):\n    return width\n"
        ctx = context_at(source, "return")

        with pytest.raises(ArgumentNotFound):
            commands.remove_parameter(ctx, name="depth")

    def test_add_and_remove_receiver(self):
        source = "class Shape:\n    def area(width):\n        return width\n"
        ctx = context_at(source, "return")

        commands.add_receiver(ctx)
        assert "def area(self, width):" in ctx.buffer.text

        commands.remove_receiver(ctx)
        assert ctx.buffer.text == source

    def test_cursor_stays_on_code_after_edit(self):
        source = "def area(width):\n    return width\n"
        ctx = context_at(source, "return", shift=0)

        commands.add_receiver(ctx)

        assert ctx.buffer.text[ctx.buffer.current_offset():].startswith("return width")


class TestMakeStatic:
    """Tests for turning a method into a static method."""

    def test_make_static(self):
        source = "class Shape:\n    def unit(self, size):\n        return size\n"
        ctx = context_at(source, "return")

        commands.make_static(ctx)

        assert ctx.buffer.text == (
            "class Shape:\n    @staticmethod\n    def unit(size):\n        return size\n"
        )

    def test_already_static(self):
        source = "class Shape:\n    @staticmethod\n    def unit(size):\n        return size\n"
        ctx = context_at(source, "return")

        with pytest.raises(AlreadyExists):
            commands.make_static(ctx)

    def test_not_a_method(self):
        source = "def unit(size):\n    return size\n"
        ctx = context_at(source, "return")

        with pytest.raises(NotInClassScope):
            commands.make_static(ctx)


def test_remove_call_site_parameter_is_not_supported():
    ctx = CommandContext.for_source("run()\n")

    with pytest.raises(NotImplementedError):
        commands.remove_call_site_parameter(ctx)
