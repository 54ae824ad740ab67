"""Orchestrator agent that delegates requests to specialists via tool calls."""

import asyncio
from typing import List, Optional, Sequence

from src.agents.address_specialist import AddressSpecialist
from src.agents.base_agent import AgentRun, ToolAgent
from src.agents.damage_specialist import DamageSpecialist
from src.agents.dummy_specialist import DummySpecialist
from src.agents.specialist import BaseSpecialist
from src.content.models import Attachment, ConversationTurn
from src.content.normalizer import SYSTEM_CONTEXT_MARKER, build_message, normalize_history
from src.providers.base import CompletionProvider
from src.providers.factory import get_provider
from src.utils.config import Settings, get_settings
from src.utils.logger import get_logger

logger = get_logger()

FALLBACK_MESSAGE = (
    "Sorry, an error occurred while processing your request. Please try again in a moment."
)

ORCHESTRATOR_PREAMBLE = f"""You are the customer service assistant of a delivery company.

You coordinate a team of specialists, each available to you as a tool:
- Decide for every user message whether you can answer directly or need a specialist.
- When a request matches a specialist's description, call it and extract its arguments
  from the user's words. If a value is missing, pass what the tool description says to
  use for missing values rather than inventing data.
- You may call several specialists in the same turn when the request covers several topics.
- A specialist may report an error. Then apologize briefly and answer as well as you can
  without its input, or ask the user for the missing information.
- Base your final answer on the specialists' results and keep it short and friendly.
- Messages starting with "{SYSTEM_CONTEXT_MARKER}" are background information about the
  session, not something the user said. Use them as context only.
- Attached images and documents come before the user's instruction in a message."""


class Orchestrator:
    """Top-level agent configured with all specialists as callable tools.

    Built once per process and shared read-only by concurrent requests.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        specialists: Sequence[BaseSpecialist],
        preamble: str = ORCHESTRATOR_PREAMBLE,
        request_timeout: Optional[float] = None,
        max_rounds: Optional[int] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            provider: Completion provider for the top-level model
            specialists: Specialists exposed as tools (names must be unique)
            preamble: System instructions for the top-level model
            request_timeout: Deadline in seconds for one chat request
            max_rounds: Maximum delegation rounds per request
        """
        for specialist in specialists:
            if not isinstance(specialist, BaseSpecialist):
                raise TypeError(
                    f"Orchestrator tools must be specialists, got {type(specialist).__name__}"
                )

        settings = get_settings()
        self.request_timeout = request_timeout or settings.request_timeout_seconds
        self.specialists = list(specialists)
        self.agent = ToolAgent(
            name="orchestrator",
            provider=provider,
            preamble=preamble,
            tools=self.specialists,
            max_rounds=max_rounds,
        )

        logger.info(
            f"Initialized Orchestrator with specialists {self.specialist_names} "
            f"(timeout {self.request_timeout}s)"
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Orchestrator":
        """Build the orchestrator and its specialists from configuration."""
        settings = settings or get_settings()
        logger.info("Initializing specialists...")

        specialists: List[BaseSpecialist] = [
            AddressSpecialist(get_provider(settings.address_specialist_model, settings)),
            DamageSpecialist(get_provider(settings.damage_specialist_model, settings)),
        ]
        if settings.register_dummy_specialist:
            specialists.append(DummySpecialist(get_provider(settings.dummy_specialist_model, settings)))

        return cls(
            provider=get_provider(settings.orchestrator_model, settings),
            specialists=specialists,
            request_timeout=settings.request_timeout_seconds,
            max_rounds=settings.max_tool_rounds,
        )

    @property
    def specialist_names(self) -> List[str]:
        return self.agent.tool_names

    async def chat(
        self,
        prompt: str,
        history: Sequence[ConversationTurn] = (),
        attachments: Sequence[Attachment] = (),
    ) -> str:
        """
        Answer one user turn.

        Never raises: a blank prompt, a failed top-level model call, an
        exhausted round budget or an expired deadline all return
        FALLBACK_MESSAGE.

        Args:
            prompt: User prompt text
            history: Session history, oldest first
            attachments: Files sent with this turn

        Returns:
            Final answer text
        """
        try:
            agent_run = await asyncio.wait_for(
                self.run(prompt, history, attachments),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Orchestrator: Request exceeded {self.request_timeout}s deadline")
            return FALLBACK_MESSAGE
        except Exception as e:
            logger.exception(f"Orchestrator: Error processing request: {e}")
            return FALLBACK_MESSAGE

        if agent_run is None:
            return FALLBACK_MESSAGE

        return agent_run.text

    async def run(
        self,
        prompt: str,
        history: Sequence[ConversationTurn] = (),
        attachments: Sequence[Attachment] = (),
    ) -> Optional[AgentRun]:
        """
        Run the delegation loop without the fallback policy.

        Returns:
            AgentRun, or None when the prompt is blank (attachments need an instruction)
        """
        if not prompt.strip():
            logger.warning(
                f"Orchestrator: Blank prompt with {len(attachments)} attachments, not calling the model"
            )
            return None

        message = build_message(prompt, attachments)

        logger.info(
            f"Orchestrator: Processing '{prompt[:50]}...' "
            f"(history: {len(history)} turns, attachments: {len(message.parts) - 1})"
        )

        agent_run = await self.agent.run(message, normalize_history(history))

        logger.info(
            f"Orchestrator: Answered in {agent_run.processing_time:.2f}s "
            f"using {[call.name for call in agent_run.tool_calls]}"
        )
        return agent_run


# Singleton instance
_orchestrator: Optional[Orchestrator] = None


def get_orchestrator() -> Orchestrator:
    """Get or create the global orchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator.from_settings()
    return _orchestrator
