"""Ollama completion provider."""

import uuid
from typing import Any, Dict, List, Optional, Sequence

import ollama

from src.content.models import DocumentPart, ImageKind, ImagePart, Message, TextPart
from src.providers.base import (
    Completion,
    CompletionProvider,
    ProviderError,
    ToolCall,
    ToolRound,
    ToolSpec,
    document_as_text,
    encode_base64,
    svg_as_text,
    unsupported_notice,
)
from src.utils.logger import get_logger

logger = get_logger()

# Ollama vision models accept common raster formats only
NATIVE_IMAGE_KINDS = {ImageKind.JPEG, ImageKind.PNG, ImageKind.GIF, ImageKind.WEBP}


class OllamaProvider(CompletionProvider):
    """Completion provider backed by an Ollama server."""

    name = "ollama"

    def __init__(
        self,
        model: str,
        host: str = "http://localhost:11434",
        temperature: float = 0.3,
        max_tokens: int = 1024,
        client: Optional[Any] = None,
    ):
        """
        Initialize Ollama provider.

        Args:
            model: Ollama model tag (e.g. 'llama3.2:3b')
            host: Ollama server URL
            temperature: Sampling temperature
            max_tokens: Maximum tokens to predict
            client: Pre-built async client (defaults to ollama.AsyncClient)
        """
        super().__init__(model, temperature=temperature, max_tokens=max_tokens)
        self.host = host
        self._client = client or ollama.AsyncClient(host=host)

    async def complete(
        self,
        preamble: str,
        tools: Sequence[ToolSpec],
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound] = (),
    ) -> Completion:
        messages = self.build_messages(preamble, history, message, rounds)

        kwargs: Dict[str, Any] = {}
        if tools:
            kwargs["tools"] = [self.tool_to_wire(spec) for spec in tools]

        logger.debug(f"Calling Ollama model {self.model} with {len(messages)} messages")

        try:
            response = await self._client.chat(
                model=self.model,
                messages=messages,
                options={
                    "temperature": self.temperature,
                    "num_predict": self.max_tokens,
                },
                **kwargs,
            )
        except Exception as e:
            logger.error(f"Ollama call to {self.model} failed: {e}")
            raise ProviderError(f"Ollama call failed: {e}") from e

        return self.parse_response(response)

    def build_messages(
        self,
        preamble: str,
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound],
    ) -> List[Dict[str, Any]]:
        """Translate neutral messages into Ollama chat messages."""
        messages: List[Dict[str, Any]] = [{"role": "system", "content": preamble}]
        messages.extend(self.message_to_wire(item) for item in history)
        messages.append(self.message_to_wire(message))

        for tool_round in rounds:
            messages.append({
                "role": "assistant",
                "content": tool_round.text,
                "tool_calls": [
                    {"function": {"name": call.name, "arguments": call.arguments}}
                    for call in tool_round.calls
                ],
            })
            # Ollama pairs tool messages with calls by order
            for call in tool_round.calls:
                result = tool_round.result_for(call.id)
                messages.append({
                    "role": "tool",
                    "content": result.content,
                    "tool_name": call.name,
                })

        return messages

    def message_to_wire(self, message: Message) -> Dict[str, Any]:
        texts: List[str] = []
        images: List[str] = []

        for part in message.parts:
            if isinstance(part, TextPart):
                texts.append(part.text)
            elif isinstance(part, ImagePart):
                if part.kind in NATIVE_IMAGE_KINDS:
                    images.append(encode_base64(part.data))
                elif part.kind == ImageKind.SVG:
                    texts.append(svg_as_text(part))
                else:
                    texts.append(unsupported_notice(part.kind.value, self.name))
            elif isinstance(part, DocumentPart):
                if part.kind.is_text:
                    texts.append(document_as_text(part))
                else:
                    texts.append(unsupported_notice(part.kind.value, self.name))

        wire: Dict[str, Any] = {"role": message.role.value, "content": "\n\n".join(texts)}
        if images:
            wire["images"] = images
        return wire

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
        """Extract text and tool calls from an Ollama chat response."""
        try:
            message = response["message"]
            content = message.get("content") or ""
            raw_calls = message.get("tool_calls") or []

            calls = []
            for raw in raw_calls:
                function = raw["function"]
                arguments = function.get("arguments") or {}
                if not isinstance(arguments, dict):
                    logger.warning(f"Ollama returned non-object arguments for {function['name']}")
                    arguments = {}
                # Ollama issues no call identifiers
                calls.append(ToolCall(
                    id=f"call_{uuid.uuid4().hex[:12]}",
                    name=function["name"],
                    arguments=dict(arguments),
                ))
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderError(f"Malformed Ollama response: {e}") from e

        return Completion(
            text=content.strip(),
            tool_calls=tuple(calls),
            input_tokens=response.get("prompt_eval_count"),
            output_tokens=response.get("eval_count"),
        )
