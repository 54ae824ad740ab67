"""Anthropic Messages API provider."""

from typing import Any, Dict, List, Optional, Sequence

from anthropic import AsyncAnthropic

from src.content.models import DocumentKind, DocumentPart, ImageKind, ImagePart, Message, TextPart
from src.providers.base import (
    Completion,
    CompletionProvider,
    ProviderError,
    ToolCall,
    ToolRound,
    ToolSpec,
    decode_text,
    encode_base64,
    svg_as_text,
    unsupported_notice,
)
from src.utils.logger import get_logger

logger = get_logger()

NATIVE_IMAGE_KINDS = {ImageKind.JPEG, ImageKind.PNG, ImageKind.GIF, ImageKind.WEBP}


class AnthropicProvider(CompletionProvider):
    """Completion provider backed by the Anthropic Messages API."""

    name = "anthropic"

    def __init__(
        self,
        model: str,
        api_key: str = "",
        temperature: float = 0.3,
        max_tokens: int = 1024,
        client: Optional[Any] = None,
    ):
        super().__init__(model, temperature=temperature, max_tokens=max_tokens)
        self._client = client or AsyncAnthropic(api_key=api_key)

    async def complete(
        self,
        preamble: str,
        tools: Sequence[ToolSpec],
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound] = (),
    ) -> Completion:
        kwargs: Dict[str, Any] = {}
        if tools:
            kwargs["tools"] = [self.tool_to_wire(spec) for spec in tools]

        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=preamble,
                messages=self.build_messages(history, message, rounds),
                **kwargs,
            )
        except Exception as e:
            logger.error(f"Anthropic call to {self.model} failed: {e}")
            raise ProviderError(f"Anthropic call failed: {e}") from e

        return self.parse_response(response)

    def build_messages(
        self,
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound],
    ) -> List[Dict[str, Any]]:
        messages = [self.message_to_wire(item) for item in history]
        messages.append(self.message_to_wire(message))

        for tool_round in rounds:
            assistant_content: List[Dict[str, Any]] = []
            if tool_round.text:
                assistant_content.append({"type": "text", "text": tool_round.text})
            assistant_content.extend(
                {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
                for call in tool_round.calls
            )
            messages.append({"role": "assistant", "content": assistant_content})

            results = []
            for call in tool_round.calls:
                result = tool_round.result_for(call.id)
                results.append({
                    "type": "tool_result",
                    "tool_use_id": call.id,
                    "content": result.content,
                    "is_error": result.is_error,
                })
            messages.append({"role": "user", "content": results})

        return messages

    def message_to_wire(self, message: Message) -> Dict[str, Any]:
        if not message.has_attachments:
            return {"role": message.role.value, "content": message.text}

        content: List[Dict[str, Any]] = []
        for part in message.parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                if part.kind in NATIVE_IMAGE_KINDS:
                    content.append({
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": part.kind.value,
                            "data": encode_base64(part.data),
                        },
                    })
                elif part.kind == ImageKind.SVG:
                    content.append({"type": "text", "text": svg_as_text(part)})
                else:
                    content.append({"type": "text", "text": unsupported_notice(part.kind.value, self.name)})
            elif isinstance(part, DocumentPart):
                content.append(self._document_block(part))

        return {"role": message.role.value, "content": content}

    @staticmethod
    def _document_block(part: DocumentPart) -> Dict[str, Any]:
        if part.kind == DocumentKind.PDF:
            source = {
                "type": "base64",
                "media_type": part.kind.value,
                "data": encode_base64(part.data),
            }
        else:
            source = {
                "type": "text",
                "media_type": "text/plain",
                "data": decode_text(part.data),
            }
        return {"type": "document", "source": source, "title": f"Attachment ({part.kind.value})"}

    @staticmethod
    def tool_to_wire(spec: ToolSpec) -> Dict[str, Any]:
        return {
            "name": spec.name,
            "description": spec.description,
            "input_schema": spec.parameters,
        }

    def parse_response(self, response: Any) -> Completion:
        texts = []
        calls = []
        for block in response.content or []:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                arguments = block.input if isinstance(block.input, dict) else {}
                calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(arguments)))

        usage = getattr(response, "usage", None)
        return Completion(
            text="\n".join(texts).strip(),
            tool_calls=tuple(calls),
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )
