"""Text reversal tool used by the test specialist."""

from pydantic import BaseModel, Field

from src.agents.tool import Tool


class ReverseTextArgs(BaseModel):
    text: str = Field(description="Text to reverse")


class TextReverserTool(Tool):
    name = "reverse_text"
    description = "Reverse a piece of text character by character."
    args_model = ReverseTextArgs

    async def run(self, args: ReverseTextArgs) -> str:
        return args.text[::-1]
