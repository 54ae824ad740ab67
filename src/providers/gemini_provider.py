"""Google Gemini provider."""

import uuid
from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import types

from src.content.models import DocumentKind, DocumentPart, ImageKind, ImagePart, Message, MessageRole, TextPart
from src.providers.base import (
    Completion,
    CompletionProvider,
    ProviderError,
    ToolCall,
    ToolRound,
    ToolSpec,
    document_as_text,
    svg_as_text,
    unsupported_notice,
)
from src.utils.logger import get_logger

logger = get_logger()

# Gemini reads HEIC/HEIF natively but not GIF
NATIVE_IMAGE_KINDS = {ImageKind.JPEG, ImageKind.PNG, ImageKind.WEBP, ImageKind.HEIC, ImageKind.HEIF}


class GeminiProvider(CompletionProvider):
    """Completion provider backed by the Gemini API (google-genai SDK)."""

    name = "gemini"

    def __init__(
        self,
        model: str,
        api_key: str = "",
        temperature: float = 0.3,
        max_tokens: int = 1024,
        client: Optional[Any] = None,
    ):
        super().__init__(model, temperature=temperature, max_tokens=max_tokens)
        self._client = client or genai.Client(api_key=api_key)

    async def complete(
        self,
        preamble: str,
        tools: Sequence[ToolSpec],
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound] = (),
    ) -> Completion:
        config = types.GenerateContentConfig(
            system_instruction=preamble,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            tools=[self.tools_to_wire(tools)] if tools else None,
            # Tool calls are dispatched by the agent loop, never by the SDK
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=self.build_contents(history, message, rounds),
                config=config,
            )
        except Exception as e:
            logger.error(f"Gemini call to {self.model} failed: {e}")
            raise ProviderError(f"Gemini call failed: {e}") from e

        return self.parse_response(response)

    def build_contents(
        self,
        history: Sequence[Message],
        message: Message,
        rounds: Sequence[ToolRound],
    ) -> List[types.Content]:
        contents = [self.message_to_wire(item) for item in history]
        contents.append(self.message_to_wire(message))

        for tool_round in rounds:
            model_parts: List[types.Part] = []
            if tool_round.text:
                model_parts.append(types.Part.from_text(text=tool_round.text))
            model_parts.extend(
                types.Part(function_call=types.FunctionCall(id=call.id, name=call.name, args=call.arguments))
                for call in tool_round.calls
            )
            contents.append(types.Content(role="model", parts=model_parts))

            response_parts = []
            for call in tool_round.calls:
                result = tool_round.result_for(call.id)
                response_parts.append(types.Part(function_response=types.FunctionResponse(
                    id=call.id,
                    name=call.name,
                    response={"error": result.content} if result.is_error else {"output": result.content},
                )))
            contents.append(types.Content(role="user", parts=response_parts))

        return contents

    def message_to_wire(self, message: Message) -> types.Content:
        parts: List[types.Part] = []
        for part in message.parts:
            if isinstance(part, TextPart):
                parts.append(types.Part.from_text(text=part.text))
            elif isinstance(part, ImagePart):
                if part.kind in NATIVE_IMAGE_KINDS:
                    parts.append(types.Part.from_bytes(data=part.data, mime_type=part.kind.value))
                elif part.kind == ImageKind.SVG:
                    parts.append(types.Part.from_text(text=svg_as_text(part)))
                else:
                    parts.append(types.Part.from_text(text=unsupported_notice(part.kind.value, self.name)))
            elif isinstance(part, DocumentPart):
                if part.kind == DocumentKind.PDF:
                    parts.append(types.Part.from_bytes(data=part.data, mime_type=part.kind.value))
                else:
                    parts.append(types.Part.from_text(text=document_as_text(part)))

        role = "model" if message.role == MessageRole.ASSISTANT else "user"
        return types.Content(role=role, parts=parts)

    @staticmethod
    def tools_to_wire(specs: Sequence[ToolSpec]) -> types.Tool:
        return types.Tool(function_declarations=[
            types.FunctionDeclaration(
                name=spec.name,
                description=spec.description,
                parameters_json_schema=spec.parameters,
            )
            for spec in specs
        ])

    def parse_response(self, response: Any) -> Completion:
        if not response.candidates:
            raise ProviderError("Gemini returned no candidates")

        content = response.candidates[0].content
        texts = []
        calls = []
        for part in (content.parts if content else None) or []:
            if part.function_call is not None:
                function_call = part.function_call
                # The Gemini API does not always issue call identifiers
                call_id = function_call.id or f"call_{uuid.uuid4().hex[:12]}"
                calls.append(ToolCall(
                    id=call_id,
                    name=function_call.name,
                    arguments=dict(function_call.args or {}),
                ))
            elif part.text:
                texts.append(part.text)

        usage = response.usage_metadata
        return Completion(
            text="".join(texts).strip(),
            tool_calls=tuple(calls),
            input_tokens=usage.prompt_token_count if usage else None,
            output_tokens=usage.candidates_token_count if usage else None,
        )
