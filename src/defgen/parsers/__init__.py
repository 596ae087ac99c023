from pathlib import Path

from defgen.parsers.base import BaseParser
from defgen.parsers.python_parser import PythonParser

_PYTHON_SUFFIXES = (".py", ".pyi")


def get_parser_for_file(file_path: Path) -> BaseParser | None:
    """Return a scope parser for the file's language, or None if unsupported."""
    if file_path.suffix.lower() in _PYTHON_SUFFIXES:
        return PythonParser()
    return None
