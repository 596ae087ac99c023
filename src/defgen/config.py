"""Configuration management for definition generation."""

from dataclasses import dataclass
from pathlib import Path

import yaml

CONFIG_FILE_NAME = ".defgen"


@dataclass
class GenerateConfig:
    """Configuration for generated code layout.

    Attributes:
        receiver: Name of the implicit first parameter of instance methods.
        static_decorator: Decorator marking a method that takes no receiver.
        indent_width: Spaces per indentation level where the buffer does not
            show one.
        module_blank_lines: Blank lines around a module-level definition.
        class_blank_lines: Blank lines above a method added to a class.
        body_placeholder: Statement put in a new body. Empty leaves the body
            blank for the user to type into.
    """
    receiver: str = "self"
    static_decorator: str = "staticmethod"
    indent_width: int = 4
    module_blank_lines: int = 2
    class_blank_lines: int = 1
    body_placeholder: str = ""

    @property
    def indent_unit(self) -> str:
        """One indentation level."""
        return " " * self.indent_width


def find_project_root(start: Path) -> Path:
    """Walk up from start to the directory holding a .defgen file or .git.

    Returns:
        The first such directory, or start itself if there is none.
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        if (directory / CONFIG_FILE_NAME).exists() or (directory / ".git").exists():
            return directory
    return start


def load_config(project_root: Path | None = None) -> GenerateConfig:
    """Load generation settings from the .defgen file in the project root.

    Args:
        project_root: Directory holding .defgen. If None, uses current directory.

    Returns:
        GenerateConfig object with loaded or default values.

    Notes:
        If .defgen doesn't exist or can't be parsed, returns default config.
        Expected YAML structure:

        ```yaml
        generate:
          receiver: self
          static_decorator: staticmethod
          indent_width: 4
          module_blank_lines: 2
          class_blank_lines: 1
          body_placeholder: ""
        ```
    """
    if project_root is None:
        project_root = Path.cwd()

    config_path = project_root / CONFIG_FILE_NAME

    if not config_path.exists():
        return GenerateConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            return GenerateConfig()

        generate_config = data.get("generate", {})
        if not isinstance(generate_config, dict):
            return GenerateConfig()

        return GenerateConfig(
            receiver=str(generate_config.get("receiver", GenerateConfig.receiver)),
            static_decorator=str(
                generate_config.get("static_decorator", GenerateConfig.static_decorator)
            ).lstrip("@"),
            indent_width=int(generate_config.get("indent_width", GenerateConfig.indent_width)),
            module_blank_lines=int(
                generate_config.get("module_blank_lines", GenerateConfig.module_blank_lines)
            ),
            class_blank_lines=int(
                generate_config.get("class_blank_lines", GenerateConfig.class_blank_lines)
            ),
            body_placeholder=str(
                generate_config.get("body_placeholder", GenerateConfig.body_placeholder) or ""
            ),
        )
    except (yaml.YAMLError, OSError, KeyError, TypeError, ValueError):
        # Return default config on any parsing errors
        return GenerateConfig()
