from dataclasses import dataclass

from defgen.buffer import SourceBuffer
from defgen.config import GenerateConfig
from defgen.navigation import BufferNavigator, Navigator
from defgen.parsers.base import BaseParser
from defgen.parsers.python_parser import PythonParser
from defgen.prompts import Prompt, StaticPrompt


@dataclass
class CommandContext:
    """The collaborators a command works with, for one invocation."""
    buffer: SourceBuffer
    parser: BaseParser
    navigator: Navigator
    prompt: Prompt
    config: GenerateConfig

    @classmethod
    def for_source(
        cls,
        source: str,
        offset: int = 0,
        prompt: Prompt | None = None,
        config: GenerateConfig | None = None,
        parser: BaseParser | None = None,
    ) -> "CommandContext":
        """Build a context over a fresh buffer, navigating within that buffer."""
        config = config or GenerateConfig()
        parser = parser or PythonParser()
        buffer = SourceBuffer(source, offset)
        return cls(
            buffer=buffer,
            parser=parser,
            navigator=BufferNavigator(buffer, parser, receiver=config.receiver),
            prompt=prompt or StaticPrompt(),
            config=config,
        )
