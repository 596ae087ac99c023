"""Ways of asking the user for a string."""

from typing import Protocol

import typer


class Prompt(Protocol):
    def prompt_string(self, message: str, default: str | None = None) -> str | None:
        """Ask for a string. None means the user cancelled."""
        ...


class TyperPrompt:
    """Interactive prompt on the terminal."""

    def prompt_string(self, message: str, default: str | None = None) -> str | None:
        try:
            return typer.prompt(
                message,
                default=default if default is not None else "",
                show_default=default is not None,
            )
        except typer.Abort:
            return None


class StaticPrompt:
    """Answers prompts from a fixed list, then behaves as if cancelled."""

    def __init__(self, *answers: str):
        self._answers = list(answers)
        self.messages: list[str] = []

    def prompt_string(self, message: str, default: str | None = None) -> str | None:
        self.messages.append(message)
        if not self._answers:
            return None
        return self._answers.pop(0)
