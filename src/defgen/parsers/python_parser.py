import tree_sitter_python
from tree_sitter import Language, Parser

from defgen.models import ClassScope, Definition, FunctionScope, ModuleLayout, TextRange
from defgen.parsers.base import BaseParser

_IMPORT_TYPES = ("import_statement", "import_from_statement", "future_import_statement")
_STATEMENT_PARENTS = ("module", "block")


class _Snapshot:
    """Source text together with the UTF-8 bytes tree-sitter indexes into."""

    def __init__(self, source: str):
        self.source = source
        self.data = bytes(source, "utf8")
        self._ascii = len(self.data) == len(source)

    def to_char(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self.data[:byte_offset].decode("utf8", errors="ignore"))

    def to_byte(self, char_offset: int) -> int:
        if self._ascii:
            return char_offset
        return len(self.source[:char_offset].encode("utf8"))

    def text(self, node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf8")

    def range(self, node) -> TextRange:
        return TextRange(self.to_char(node.start_byte), self.to_char(node.end_byte))

    def line_start(self, offset: int) -> int:
        return self.source.rfind("\n", 0, offset) + 1

    def line_end(self, offset: int) -> int:
        newline = self.source.find("\n", offset)
        return len(self.source) if newline < 0 else newline

    def indent(self, offset: int) -> str:
        """Literal whitespace prefix of the line holding offset."""
        line = self.source[self.line_start(offset):self.line_end(offset)]
        return line[:len(line) - len(line.lstrip(" \t"))]


def _definition_node(node):
    """Unwrap a decorated definition; None for anything that is not a def/class."""
    if node.type == "decorated_definition":
        return node.child_by_field_name("definition")
    if node.type in ("function_definition", "class_definition"):
        return node
    return None


def _outer_node(node):
    """The decorated_definition wrapping node, or node itself."""
    if node.parent is not None and node.parent.type == "decorated_definition":
        return node.parent
    return node


def _is_docstring(node) -> bool:
    return (
        node.type == "expression_statement"
        and len(node.named_children) == 1
        and node.named_children[0].type in ("string", "concatenated_string")
    )


class PythonParser(BaseParser):
    """Scope queries over Python source code using tree-sitter."""

    def __init__(self):
        self.language = Language(tree_sitter_python.language())
        self.parser = Parser(self.language)

    def _parse(self, source: str):
        snapshot = _Snapshot(source)
        tree = self.parser.parse(snapshot.data)
        return snapshot, tree.root_node

    def _node_chain(self, root, byte_offset: int) -> list:
        """Nodes containing byte_offset, from the root down to the innermost.

        A node whose end touches the offset still contains it (a cursor right
        after the last character of a body is inside that body), unless a
        sibling strictly contains the offset.
        """
        chain = [root]
        node = root
        while True:
            next_node = None
            for child in node.children:
                if child.start_byte <= byte_offset < child.end_byte:
                    next_node = child
                    break
                if child.start_byte <= byte_offset == child.end_byte:
                    next_node = child
            if next_node is None:
                return chain
            chain.append(next_node)
            node = next_node

    def _innermost(self, source: str, offset: int, node_type: str):
        snapshot, root = self._parse(source)
        chain = self._node_chain(root, snapshot.to_byte(offset))
        for node in reversed(chain):
            if node.type == node_type:
                return snapshot, node
        return snapshot, None

    def _function_scope(self, snapshot: _Snapshot, node) -> FunctionScope | None:
        name_node = node.child_by_field_name("name")
        params_node = node.child_by_field_name("parameters")
        if name_node is None or params_node is None:
            return None

        outer = _outer_node(node)
        start = snapshot.to_char(node.start_byte)
        block = outer.parent
        in_class = (
            block is not None
            and block.type == "block"
            and block.parent is not None
            and block.parent.type == "class_definition"
        )

        return FunctionScope(
            name=snapshot.text(name_node),
            extent=snapshot.range(outer),
            header=TextRange(start, snapshot.to_char(params_node.end_byte)),
            parameters=snapshot.range(params_node),
            indent=snapshot.indent(start),
            in_class=in_class,
        )

    def _class_scope(self, snapshot: _Snapshot, node) -> ClassScope | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None

        outer = _outer_node(node)
        header_start = snapshot.to_char(node.start_byte)
        header_indent = snapshot.indent(header_start)
        extent = snapshot.range(outer)

        body = node.child_by_field_name("body")
        if body is None or not body.named_children:
            body_indent = header_indent + "    "
            body_end = snapshot.line_end(extent.end)
        else:
            first = snapshot.to_char(body.named_children[0].start_byte)
            if snapshot.line_start(first) == snapshot.line_start(header_start):
                # Body on the header line: "class A: pass"
                body_indent = header_indent + "    "
            else:
                body_indent = snapshot.indent(first)
            end = snapshot.to_char(body.end_byte)
            while end > 0 and snapshot.source[end - 1] in " \t\r\n":
                end -= 1
            body_end = snapshot.line_end(end)

        return ClassScope(
            name=snapshot.text(name_node),
            extent=extent,
            header_start=header_start,
            header_indent=header_indent,
            body_indent=body_indent,
            body_end=body_end,
        )

    def enclosing_function(self, source: str, offset: int) -> FunctionScope | None:
        """Find the innermost function or method definition containing offset.

        Args:
            source: Python source code
            offset: Character offset into source

        Returns:
            FunctionScope, or None if offset is outside every function
        """
        snapshot, node = self._innermost(source, offset, "function_definition")
        if node is None:
            return None
        return self._function_scope(snapshot, node)

    def enclosing_class(self, source: str, offset: int) -> ClassScope | None:
        """Find the innermost class definition containing offset.

        Args:
            source: Python source code
            offset: Character offset into source

        Returns:
            ClassScope, or None if offset is outside every class
        """
        snapshot, node = self._innermost(source, offset, "class_definition")
        if node is None:
            return None
        return self._class_scope(snapshot, node)

    def find_class(self, source: str, name: str) -> ClassScope | None:
        """Find a top-level class (decorated or not) by name."""
        snapshot, root = self._parse(source)
        for child in root.children:
            definition = _definition_node(child)
            if definition is None or definition.type != "class_definition":
                continue
            name_node = definition.child_by_field_name("name")
            if name_node and snapshot.text(name_node) == name:
                return self._class_scope(snapshot, definition)
        return None

    def _bindings(self, snapshot: _Snapshot, node):
        """Yield (kind, name, node) for each name a statement binds."""
        definition = _definition_node(node)
        if definition is not None:
            name_node = definition.child_by_field_name("name")
            if name_node:
                kind = "class" if definition.type == "class_definition" else "function"
                yield kind, snapshot.text(name_node), _outer_node(definition)
            return

        if node.type == "expression_statement":
            for child in node.named_children:
                if child.type != "assignment":
                    continue
                left = child.child_by_field_name("left")
                if left is not None and left.type == "identifier":
                    yield "variable", snapshot.text(left), node
            return

        if node.type in ("import_statement", "import_from_statement"):
            for name_node in node.children_by_field_name("name"):
                if name_node.type == "aliased_import":
                    alias = name_node.child_by_field_name("alias")
                    if alias:
                        yield "import", snapshot.text(alias), node
                elif node.type == "import_statement":
                    # "import a.b" binds "a"
                    yield "import", snapshot.text(name_node).split(".")[0], node
                else:
                    yield "import", snapshot.text(name_node), node

    def find_definition(
        self,
        source: str,
        name: str,
        class_scope: ClassScope | None = None
    ) -> Definition | None:
        """Find what a name is bound to.

        Without a class scope the module's top level is searched: functions,
        classes, simple assignments, and imports. With a class scope, the
        class body is searched and functions found there are methods.

        Args:
            source: Python source code
            name: Name to resolve
            class_scope: Class whose body to search, or None for module level

        Returns:
            Definition, or None if the name is not bound there
        """
        snapshot, root = self._parse(source)
        statements = root.children
        in_class = False

        if class_scope is not None:
            chain = self._node_chain(root, snapshot.to_byte(class_scope.header_start))
            class_node = next(
                (
                    node for node in reversed(chain)
                    if node.type == "class_definition"
                    and snapshot.to_char(node.start_byte) == class_scope.header_start
                ),
                None,
            )
            body = class_node.child_by_field_name("body") if class_node is not None else None
            if body is None:
                return None
            statements = body.children
            in_class = True

        for statement in statements:
            for kind, bound_name, node in self._bindings(snapshot, statement):
                if bound_name != name:
                    continue
                if in_class and kind == "function":
                    kind = "method"
                return Definition(kind=kind, name=bound_name, extent=snapshot.range(node))

        return None

    def module_layout(self, source: str) -> ModuleLayout:
        """Locate the top-level landmarks used to place new definitions.

        The leading import block is the run of import statements at the top
        of the module, after an optional docstring. Comments are ignored.

        Returns:
            ModuleLayout with line-start offsets of the first top-level class,
            the first top-level function (decorators included), and the first
            statement after the leading import block.
        """
        snapshot, root = self._parse(source)
        first_class = None
        first_function = None
        after_imports = None

        seen_import = False
        in_import_block = True
        first_statement = True

        for child in root.named_children:
            if child.type == "comment":
                continue

            start = snapshot.line_start(snapshot.to_char(child.start_byte))
            definition = _definition_node(child)
            if definition is not None:
                if definition.type == "class_definition" and first_class is None:
                    first_class = start
                elif definition.type == "function_definition" and first_function is None:
                    first_function = start

            if in_import_block:
                if child.type in _IMPORT_TYPES:
                    seen_import = True
                elif first_statement and _is_docstring(child):
                    pass
                else:
                    if seen_import:
                        after_imports = start
                    in_import_block = False
            first_statement = False

        return ModuleLayout(
            first_class=first_class,
            first_function=first_function,
            after_imports=after_imports,
            end=len(source),
        )

    def enclosing_statement(self, source: str, offset: int) -> TextRange:
        """Find the innermost whole statement containing offset.

        Returns:
            Range of the statement, or of the line holding offset if no
            statement contains it.
        """
        snapshot, root = self._parse(source)
        chain = self._node_chain(root, snapshot.to_byte(offset))
        for node in reversed(chain):
            if node.parent is not None and node.parent.type in _STATEMENT_PARENTS and node.type != "comment":
                return snapshot.range(node)
        return TextRange(snapshot.line_start(offset), snapshot.line_end(offset))
