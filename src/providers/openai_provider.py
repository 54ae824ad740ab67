"""OpenAI chat-completions provider."""

import json
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI

from src.content.models import DocumentKind, DocumentPart, ImageKind, ImagePart, Message, TextPart
from src.providers.base import (
    Completion,
    CompletionProvider,
    ProviderError,
    ToolCall,
    ToolRound,
    ToolSpec,
    data_url,
    document_as_text,
    svg_as_text,
    unsupported_notice,
)
from src.utils.logger import get_logger

logger = get_logger()

NATIVE_IMAGE_KINDS = {ImageKind.JPEG, ImageKind.PNG, ImageKind.GIF, ImageKind.WEBP}


class OpenAIProvider(CompletionProvider):
    """Completion provider backed by the OpenAI Chat Completions API."""

    name = "openai"

    def __init__(
        self,
        model: str,
        api_key: str = "",
        temperature: float = 0.3,
        max_tokens: int = 1024,
        client: Optional[Any] = None,
    ):
        super().__init__(model, temperature=temperature, max_tokens=max_tokens)
        self._client = client or AsyncOpenAI(api_key=api_key)

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
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(preamble, history, message, rounds),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                **kwargs,
            )
        except Exception as e:
            logger.error(f"OpenAI call to {self.model} failed: {e}")
            raise ProviderError(f"OpenAI call failed: {e}") from e

        return self.parse_response(response)

    def build_messages(
        self,
        preamble: str,
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound],
    ) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = [{"role": "system", "content": preamble}]
        messages.extend(self.message_to_wire(item) for item in history)
        messages.append(self.message_to_wire(message))

        for tool_round in rounds:
            messages.append({
                "role": "assistant",
                "content": tool_round.text or None,
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments),
                        },
                    }
                    for call in tool_round.calls
                ],
            })
            for call in tool_round.calls:
                messages.append({
                    "role": "tool",
                    "tool_call_id": call.id,
                    "content": tool_round.result_for(call.id).content,
                })

        return messages

    def message_to_wire(self, message: Message) -> Dict[str, Any]:
        if not message.has_attachments:
            return {"role": message.role.value, "content": message.text}

        content: List[Dict[str, Any]] = []
        for index, part in enumerate(message.parts):
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                if part.kind in NATIVE_IMAGE_KINDS:
                    content.append({
                        "type": "image_url",
                        "image_url": {"url": data_url(part.kind.value, part.data)},
                    })
                elif part.kind == ImageKind.SVG:
                    content.append({"type": "text", "text": svg_as_text(part)})
                else:
                    content.append({"type": "text", "text": unsupported_notice(part.kind.value, self.name)})
            elif isinstance(part, DocumentPart):
                if part.kind == DocumentKind.PDF:
                    content.append({
                        "type": "file",
                        "file": {
                            "filename": f"attachment_{index + 1}.pdf",
                            "file_data": data_url(part.kind.value, part.data),
                        },
                    })
                else:
                    content.append({"type": "text", "text": document_as_text(part)})

        return {"role": message.role.value, "content": content}

    @staticmethod
    def tool_to_wire(spec: ToolSpec) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": spec.name,
                "description": spec.description,
                "parameters": spec.parameters,
            },
        }

    def parse_response(self, response: Any) -> Completion:
        if not response.choices:
            raise ProviderError("OpenAI returned no choices")

        choice_message = response.choices[0].message
        calls = []
        for raw in choice_message.tool_calls or []:
            try:
                arguments = json.loads(raw.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON arguments for tool {raw.function.name}")
                arguments = {}
            if not isinstance(arguments, dict):
                arguments = {}
            calls.append(ToolCall(id=raw.id, name=raw.function.name, arguments=arguments))

        usage = response.usage
        return Completion(
            text=(choice_message.content or "").strip(),
            tool_calls=tuple(calls),
            input_tokens=usage.prompt_tokens if usage else None,
            output_tokens=usage.completion_tokens if usage else None,
        )
