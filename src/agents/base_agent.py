"""Bounded tool-calling agent loop shared by the orchestrator and specialists."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from src.agents.errors import AgentError
from src.agents.tool import Tool
from src.content.models import Message
from src.providers.base import (
    CompletionProvider,
    ToolCall,
    ToolResult,
    ToolRound,
    ToolSpec,
)
from src.utils.config import get_settings
from src.utils.logger import get_logger

logger = get_logger()


@dataclass
class AgentRun:
    """Standardized agent run result."""
    text: str
    agent_name: str
    rounds: List[ToolRound] = field(default_factory=list)
    processing_time: float = 0.0
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None

    @property
    def tool_calls(self) -> List[ToolCall]:
        return [call for tool_round in self.rounds for call in tool_round.calls]

    @property
    def total_tokens(self) -> Optional[int]:
        if self.input_tokens is None and self.output_tokens is None:
            return None
        return (self.input_tokens or 0) + (self.output_tokens or 0)


class ToolAgent:
    """An LLM agent with fixed instructions and a fixed set of tools.

    Immutable after construction, so one instance can serve concurrent
    runs. Each run keeps its own working context.
    """

    def __init__(
        self,
        name: str,
        provider: CompletionProvider,
        preamble: str,
        tools: Sequence[Tool] = (),
        max_rounds: Optional[int] = None,
    ):
        """
        Initialize agent.

        Args:
            name: Agent name used in logs
            provider: Completion provider backing this agent
            preamble: System instructions
            tools: Tools this agent may call (names must be unique)
            max_rounds: Maximum tool rounds per run (defaults to settings)
        """
        self.name = name
        self.provider = provider
        self.preamble = preamble
        self.max_rounds = max_rounds or get_settings().max_tool_rounds

        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"{name}: duplicate tool name '{tool.name}'")
            self._tools[tool.name] = tool

        self._tool_specs = tuple(tool.spec() for tool in self._tools.values())

        logger.info(
            f"Initialized {self.name} with {provider!r} and tools {list(self._tools)}"
        )

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    @property
    def tool_specs(self) -> Sequence[ToolSpec]:
        return self._tool_specs

    async def run(self, message: Message, history: Sequence[Message] = ()) -> AgentRun:
        """
        Drive the model until it answers without calling tools.

        Rounds are strictly sequential; all results of a round are
        collected before the model is called again.

        Args:
            message: New user message
            history: Prior conversation, oldest first

        Returns:
            AgentRun with the final text and the completed rounds

        Raises:
            ProviderError: If a model call fails
            AgentError: If no final answer is produced within max_rounds
        """
        start_time = time.time()
        rounds: List[ToolRound] = []
        input_tokens: Optional[int] = None
        output_tokens: Optional[int] = None

        for round_number in range(1, self.max_rounds + 1):
            completion = await self.provider.complete(
                self.preamble, self._tool_specs, history, message, tuple(rounds)
            )

            if completion.input_tokens is not None:
                input_tokens = (input_tokens or 0) + completion.input_tokens
            if completion.output_tokens is not None:
                output_tokens = (output_tokens or 0) + completion.output_tokens

            if completion.is_final:
                processing_time = time.time() - start_time
                logger.info(
                    f"{self.name}: Answered after {len(rounds)} tool rounds "
                    f"in {processing_time:.2f}s"
                )
                return AgentRun(
                    text=completion.text,
                    agent_name=self.name,
                    rounds=rounds,
                    processing_time=processing_time,
                    input_tokens=input_tokens,
                    output_tokens=output_tokens,
                )

            logger.info(
                f"{self.name}: Round {round_number} calls "
                f"{[call.name for call in completion.tool_calls]}"
            )
            results = await self.dispatch(completion.tool_calls)
            rounds.append(ToolRound(
                text=completion.text,
                calls=completion.tool_calls,
                results=tuple(results),
            ))

        raise AgentError(f"{self.name}: no final answer after {self.max_rounds} tool rounds")

    async def dispatch(self, calls: Sequence[ToolCall]) -> List[ToolResult]:
        """Run all calls of one round concurrently."""
        return list(await asyncio.gather(*(self._execute(call) for call in calls)))

    async def _execute(self, call: ToolCall) -> ToolResult:
        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning(f"{self.name}: Model requested unknown tool '{call.name}'")
            return ToolResult(
                call_id=call.id,
                name=call.name,
                content=f"Unknown tool '{call.name}'. Available tools: {', '.join(self._tools) or 'none'}",
                is_error=True,
            )
        return await tool.invoke(call)
