"""Model-call provider abstraction and tool-calling protocol types.

Agents never talk to a vendor SDK directly. Each backend implements
``CompletionProvider.complete`` and translates the neutral message and
tool types below into its own wire format.
"""

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from src.content.models import DocumentPart, ImageKind, ImagePart, Message
from src.utils.logger import get_logger

logger = get_logger()


class ProviderError(Exception):
    """Raised when a model call fails (network, auth, rate limit, bad response)."""
    pass


class ProviderConfigError(Exception):
    """Raised when a provider cannot be constructed from configuration."""
    pass


@dataclass(frozen=True)
class ToolSpec:
    """Name, description and argument schema of a callable tool."""
    name: str
    description: str
    parameters: Dict[str, Any]


@dataclass(frozen=True)
class ToolCall:
    """A model's request to run one tool."""
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call, always returned to the calling model."""
    call_id: str
    name: str
    content: str
    is_error: bool = False


@dataclass(frozen=True)
class ToolRound:
    """One delegation round: the model's tool calls and their results."""
    text: str
    calls: Tuple[ToolCall, ...]
    results: Tuple[ToolResult, ...]

    def result_for(self, call_id: str) -> ToolResult:
        """Get the result paired with a call identifier."""
        for result in self.results:
            if result.call_id == call_id:
                return result
        raise KeyError(f"No result for tool call {call_id!r}")


@dataclass
class Completion:
    """Result of one model call: final text, or tool calls to run."""
    text: str = ""
    tool_calls: Tuple[ToolCall, ...] = ()
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None

    @property
    def is_final(self) -> bool:
        return not self.tool_calls


class CompletionProvider(ABC):
    """A hosted completion service backing one or more agents.

    Instances hold only immutable configuration and a client handle, so a
    single provider can be shared by several agents and used concurrently.
    """

    name: str = "provider"

    def __init__(self, model: str, temperature: float = 0.3, max_tokens: int = 1024):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @abstractmethod
    async def complete(
        self,
        preamble: str,
        tools: Sequence[ToolSpec],
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound] = (),
    ) -> Completion:
        """
        Run one model call.

        Args:
            preamble: System instructions for the agent
            tools: Tools the model may call
            history: Prior conversation, oldest first
            message: The new user message
            rounds: Tool rounds already completed for this message

        Returns:
            Completion with either final text or tool calls

        Raises:
            ProviderError: If the call fails
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def data_url(mimetype: str, data: bytes) -> str:
    return f"data:{mimetype};base64,{encode_base64(data)}"


def decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def document_as_text(part: DocumentPart) -> str:
    """Render a text-like document as a labelled text block."""
    return f"[Attached document ({part.kind.value})]\n{decode_text(part.data)}"


def svg_as_text(part: ImagePart) -> str:
    return f"[Attached SVG image ({ImageKind.SVG.value})]\n{decode_text(part.data)}"


def unsupported_notice(mimetype: str, provider: str) -> str:
    """Textual stand-in for an attachment a provider cannot ingest."""
    logger.warning(f"{provider}: attachment type {mimetype} not supported, sending notice instead")
    return f"[An attachment of type {mimetype} was provided but cannot be viewed by this model]"
