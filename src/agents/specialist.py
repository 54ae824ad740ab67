"""Base class for specialists: bounded agents exposed to the orchestrator as tools."""

from abc import abstractmethod
from typing import Any, List, Sequence

from pydantic import BaseModel

from src.agents.base_agent import AgentRun, ToolAgent
from src.agents.tool import Tool
from src.content.models import Message
from src.providers.base import CompletionProvider
from src.utils.logger import get_logger

logger = get_logger()


class BaseSpecialist(Tool):
    """Abstract base class for all specialists.

    A specialist binds its instructions and domain tools at construction
    and holds no per-call state. It never owns another specialist, so
    delegation stays one level deep.

    The ``description`` class attribute is what the orchestrator's model
    reads to decide when to delegate; it must describe the user intents
    that should trigger this specialist.
    """

    def __init__(self, provider: CompletionProvider, max_rounds: int | None = None):
        """
        Initialize specialist.

        Args:
            provider: Completion provider backing this specialist's agent
            max_rounds: Maximum domain tool rounds per invocation
        """
        tools = list(self._build_tools())
        for tool in tools:
            if isinstance(tool, BaseSpecialist):
                raise ValueError(
                    f"{self.name}: specialists cannot delegate to other specialists "
                    f"('{tool.name}')"
                )

        self.agent = ToolAgent(
            name=self.name,
            provider=provider,
            preamble=self.get_system_prompt(),
            tools=tools,
            max_rounds=max_rounds,
        )

    async def run(self, args: BaseModel) -> Any:
        """Process a delegated request and return the agent's final text."""
        agent_run = await self.process(args)
        return agent_run.text

    async def process(self, args: BaseModel) -> AgentRun:
        """
        Send the domain prompt for these arguments to the specialist's agent.

        Args:
            args: Validated arguments extracted by the orchestrator

        Returns:
            AgentRun from the specialist's own agent loop
        """
        prompt = self.build_prompt(args)
        logger.info(f"{self.name}: Processing '{prompt[:80]}...'")
        return await self.agent.run(Message.user(prompt))

    def get_system_prompt(self) -> str:
        return self._build_system_prompt()

    @abstractmethod
    def _build_system_prompt(self) -> str:
        """Build specialist-specific instructions."""
        pass

    @abstractmethod
    def build_prompt(self, args: BaseModel) -> str:
        """Interpolate arguments into the specialist's prompt template."""
        pass

    def _build_tools(self) -> Sequence[Tool]:
        """Domain tools owned by this specialist."""
        return []

    @property
    def tool_names(self) -> List[str]:
        return self.agent.tool_names
