"""Shared fakes for unit tests."""

from typing import Any, Callable, Dict, List, Sequence, Union

import pytest

from src.content.models import Message
from src.providers.base import (
    Completion,
    CompletionProvider,
    ProviderError,
    ToolCall,
    ToolRound,
    ToolSpec,
)

ScriptItem = Union[Completion, Exception, Callable[[Message, Sequence[ToolRound]], Completion]]


class ScriptedProvider(CompletionProvider):
    """Mock provider replaying a fixed script of completions.

    Script items are Completions, exceptions to raise, or callables
    receiving (message, rounds) and returning a Completion.
    """

    name = "scripted"

    def __init__(self, script: Sequence[ScriptItem], model: str = "scripted-model"):
        super().__init__(model)
        self.script: List[ScriptItem] = list(script)
        self.calls: List[Dict[str, Any]] = []

    async def complete(
        self,
        preamble: str,
        tools: Sequence[ToolSpec],
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound] = (),
    ) -> Completion:
        self.calls.append({
            "preamble": preamble,
            "tools": list(tools),
            "history": list(history),
            "message": message,
            "rounds": list(rounds),
        })
        if not self.script:
            raise ProviderError("script exhausted")

        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(message, rounds)
        return item


def tool_call(name: str, call_id: str = "call_1", **arguments) -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=arguments)


@pytest.fixture
def scripted():
    """Factory for scripted providers."""
    return ScriptedProvider


@pytest.fixture
def make_call():
    """Factory for tool calls."""
    return tool_call
