"""Test specialist used to verify the delegation path end to end.

It doubles as the reference layout for new specialists: argument model
with described fields, extra validation, a prompt template, one domain
tool and a structured output.
"""

from typing import Literal, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from src.agents.specialist import BaseSpecialist
from src.agents.tool import Tool
from src.tools.text_reverser import TextReverserTool


class DummyArgs(BaseModel):
    """Arguments the orchestrator sends to the test specialist."""

    message: str = Field(description="The main message to process")
    detail_level: Literal["brief", "normal", "detailed"] = Field(
        default="normal",
        description="Level of detail of the answer: 'brief', 'normal' or 'detailed'",
    )

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be empty")
        return value


class DummyMetadata(BaseModel):
    tools_used: int
    tokens_used: Optional[int] = None


class DummyOutput(BaseModel):
    """Structured response of the test specialist."""

    reply: str
    success: bool
    metadata: Optional[DummyMetadata] = None


class DummySpecialist(BaseSpecialist):
    """Echo-style specialist for system checks and demonstrations."""

    name = "dummy_specialist"
    description = (
        "A test agent to verify the system. Use it when the user wants to test "
        "the system, says 'ping' or 'test', or asks for a demonstration."
    )
    args_model = DummyArgs

    def _build_tools(self) -> Sequence[Tool]:
        return [TextReverserTool()]

    def _build_system_prompt(self) -> str:
        return """You are a test agent used to verify that delegation works.

RULES:
1. If the message is 'ping', answer exactly 'pong'.
2. Otherwise echo the message back, prefixed with 'Echo: '.
3. If asked to reverse text, use the reverse_text tool.
4. Respect the requested detail level: 'brief' is one line, 'detailed' may add a short explanation."""

    def build_prompt(self, args: DummyArgs) -> str:
        return (
            f"Process the following message with detail level '{args.detail_level}':"
            f"\n\n{args.message}"
        )

    async def run(self, args: DummyArgs) -> DummyOutput:
        agent_run = await self.process(args)
        return DummyOutput(
            reply=agent_run.text,
            success=True,
            metadata=DummyMetadata(
                tools_used=len(agent_run.tool_calls),
                tokens_used=agent_run.total_tokens,
            ),
        )
