"""Unit tests for provider adapters and provider selection."""

import json
from types import SimpleNamespace

import pytest

from src.content.models import (
    DocumentKind,
    DocumentPart,
    ImageKind,
    ImagePart,
    Message,
    MessageRole,
    TextPart,
)
from src.providers.anthropic_provider import AnthropicProvider
from src.providers.base import (
    ProviderConfigError,
    ProviderError,
    ToolCall,
    ToolResult,
    ToolRound,
    ToolSpec,
)
from src.providers.factory import create_provider, get_provider, parse_model_spec
from src.providers.gemini_provider import GeminiProvider
from src.providers.ollama_provider import OllamaProvider
from src.providers.openai_provider import OpenAIProvider
from src.utils.config import Settings

SPEC = ToolSpec(
    name="lookup_cost",
    description="Look up repair costs.",
    parameters={"type": "object", "properties": {"item_name": {"type": "string"}}},
)

ROUND = ToolRound(
    text="Let me check.",
    calls=(
        ToolCall(id="a", name="lookup_cost", arguments={"item_name": "laptop"}),
        ToolCall(id="b", name="lookup_cost", arguments={"item_name": "vase"}),
    ),
    # Results deliberately in a different order than the calls
    results=(
        ToolResult(call_id="b", name="lookup_cost", content="vase: 45"),
        ToolResult(call_id="a", name="lookup_cost", content="boom", is_error=True),
    ),
)

MIXED = Message(
    role=MessageRole.USER,
    parts=(
        ImagePart(data=b"png", kind=ImageKind.PNG),
        DocumentPart(data=b"%PDF", kind=DocumentKind.PDF),
        DocumentPart(data=b"a,b", kind=DocumentKind.CSV),
        ImagePart(data=b"heic", kind=ImageKind.HEIC),
        TextPart("What is this?"),
    ),
)


class FakeCreate:
    """Records keyword arguments and returns (or raises) a canned response."""

    def __init__(self, response):
        self.response = response
        self.kwargs = None

    async def __call__(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class TestParseModelSpec:
    """Test cases for model string parsing."""

    def test_splits_on_first_colon_only(self):
        assert parse_model_spec("ollama:llama3.2:3b") == ("ollama", "llama3.2:3b")

    def test_provider_case_insensitive(self):
        assert parse_model_spec("OpenAI:gpt-4o") == ("openai", "gpt-4o")

    def test_invalid_specs(self):
        for spec in ("gpt-4o", "openai:", "mistral:large", ""):
            with pytest.raises(ProviderConfigError):
                parse_model_spec(spec)


class TestCreateProvider:
    """Test cases for create_provider."""

    def test_ollama(self):
        provider = create_provider("ollama:llama3.2:3b", Settings(ollama_base_url="http://ollama:11434"))

        assert isinstance(provider, OllamaProvider)
        assert provider.model == "llama3.2:3b"
        assert provider.host == "http://ollama:11434"

    def test_openai_requires_key(self):
        with pytest.raises(ProviderConfigError):
            create_provider("openai:gpt-4o", Settings(openai_api_key=""))

    def test_anthropic_requires_key(self):
        with pytest.raises(ProviderConfigError):
            create_provider("anthropic:claude-sonnet-4-5", Settings(anthropic_api_key=""))

    def test_generation_settings_applied(self):
        settings = Settings(openai_api_key="sk-test", response_temperature=0.1, max_response_tokens=256)

        provider = create_provider("openai:gpt-4o", settings)

        assert isinstance(provider, OpenAIProvider)
        assert provider.temperature == 0.1
        assert provider.max_tokens == 256

    def test_gemini_requires_key(self):
        with pytest.raises(ProviderConfigError):
            create_provider("gemini:gemini-1.5-flash-002", Settings(gemini_api_key=""))

    def test_gemini(self):
        provider = create_provider("gemini:gemini-1.5-flash-002", Settings(gemini_api_key="g-test"))

        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-1.5-flash-002"


class TestGetProvider:
    """Test cases for shared provider handles."""

    def test_same_configuration_is_shared(self):
        settings = Settings(ollama_base_url="http://shared:11434")

        assert get_provider("ollama:shared-model", settings) is get_provider(" ollama:shared-model ", settings)

    def test_different_configuration_not_reused(self):
        """Test that a handle built from other settings is never returned."""
        first = get_provider("ollama:m1", Settings(ollama_base_url="http://a:1"))
        second = get_provider("ollama:m1", Settings(ollama_base_url="http://b:2"))

        assert first is not second
        assert first.host == "http://a:1"
        assert second.host == "http://b:2"

    def test_generation_settings_part_of_identity(self):
        cold = get_provider("ollama:m2", Settings(response_temperature=0.0))
        warm = get_provider("ollama:m2", Settings(response_temperature=0.9))

        assert cold.temperature == 0.0
        assert warm.temperature == 0.9


class TestOpenAIProvider:
    """Test cases for the OpenAI adapter."""

    def setup_method(self):
        self.create = FakeCreate(SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(
                content="",
                tool_calls=[SimpleNamespace(
                    id="call_x",
                    function=SimpleNamespace(name="lookup_cost", arguments='{"item_name": "tv"}'),
                )],
            ))],
            usage=SimpleNamespace(prompt_tokens=12, completion_tokens=4),
        ))
        client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=self.create)))
        self.provider = OpenAIProvider("gpt-4o", client=client)

    @pytest.mark.asyncio
    async def test_complete_parses_tool_calls(self):
        completion = await self.provider.complete("preamble", [SPEC], [], Message.user("hi"))

        assert completion.tool_calls == (ToolCall(id="call_x", name="lookup_cost", arguments={"item_name": "tv"}),)
        assert completion.input_tokens == 12
        assert self.create.kwargs["messages"][0] == {"role": "system", "content": "preamble"}
        assert self.create.kwargs["tools"][0]["function"]["name"] == "lookup_cost"

    @pytest.mark.asyncio
    async def test_no_tools_key_without_tools(self):
        await self.provider.complete("preamble", [], [], Message.user("hi"))

        assert "tools" not in self.create.kwargs

    @pytest.mark.asyncio
    async def test_error_wrapped(self):
        self.create.response = RuntimeError("401 unauthorized")

        with pytest.raises(ProviderError):
            await self.provider.complete("p", [], [], Message.user("hi"))

    def test_rounds_keyed_by_call_id(self):
        messages = self.provider.build_messages("p", [], Message.user("hi"), [ROUND])

        assistant = messages[2]
        assert [call["id"] for call in assistant["tool_calls"]] == ["a", "b"]
        assert json.loads(assistant["tool_calls"][0]["function"]["arguments"]) == {"item_name": "laptop"}
        assert messages[3] == {"role": "tool", "tool_call_id": "a", "content": "boom"}
        assert messages[4] == {"role": "tool", "tool_call_id": "b", "content": "vase: 45"}

    def test_multimodal_parts(self):
        wire = self.provider.message_to_wire(MIXED)

        types = [block["type"] for block in wire["content"]]
        assert types == ["image_url", "file", "text", "text", "text"]
        assert wire["content"][0]["image_url"]["url"].startswith("data:image/png;base64,")
        assert "a,b" in wire["content"][2]["text"]
        assert "image/heic" in wire["content"][3]["text"]
        assert wire["content"][4] == {"type": "text", "text": "What is this?"}

    def test_invalid_json_arguments(self):
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(
                content=None,
                tool_calls=[SimpleNamespace(id="c", function=SimpleNamespace(name="t", arguments="{oops"))],
            ))],
            usage=None,
        )

        completion = self.provider.parse_response(response)

        assert completion.tool_calls[0].arguments == {}
        assert completion.input_tokens is None

    def test_no_choices(self):
        with pytest.raises(ProviderError):
            self.provider.parse_response(SimpleNamespace(choices=[], usage=None))


class TestAnthropicProvider:
    """Test cases for the Anthropic adapter."""

    def setup_method(self):
        self.create = FakeCreate(SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Checking costs."),
                SimpleNamespace(type="tool_use", id="toolu_1", name="lookup_cost", input={"item_name": "lamp"}),
            ],
            usage=SimpleNamespace(input_tokens=20, output_tokens=7),
        ))
        client = SimpleNamespace(messages=SimpleNamespace(create=self.create))
        self.provider = AnthropicProvider("claude-sonnet-4-5", client=client)

    @pytest.mark.asyncio
    async def test_complete(self):
        completion = await self.provider.complete("preamble", [SPEC], [], Message.user("hi"))

        assert completion.text == "Checking costs."
        assert completion.tool_calls[0].id == "toolu_1"
        assert completion.output_tokens == 7
        assert self.create.kwargs["system"] == "preamble"
        assert self.create.kwargs["tools"][0]["input_schema"] == SPEC.parameters

    def test_rounds_as_tool_results(self):
        messages = self.provider.build_messages([], Message.user("hi"), [ROUND])

        assert messages[1]["role"] == "assistant"
        assert messages[1]["content"][0] == {"type": "text", "text": "Let me check."}
        results = messages[2]["content"]
        assert [r["tool_use_id"] for r in results] == ["a", "b"]
        assert results[0]["is_error"] is True
        assert results[1]["content"] == "vase: 45"

    def test_multimodal_parts(self):
        wire = self.provider.message_to_wire(MIXED)

        blocks = wire["content"]
        assert blocks[0]["source"]["media_type"] == "image/png"
        assert blocks[1]["type"] == "document"
        assert blocks[1]["source"]["type"] == "base64"
        assert blocks[2]["source"] == {"type": "text", "media_type": "text/plain", "data": "a,b"}
        assert blocks[3]["type"] == "text"
        assert blocks[-1] == {"type": "text", "text": "What is this?"}


class TestOllamaProvider:
    """Test cases for the Ollama adapter."""

    def setup_method(self):
        self.chat = FakeCreate({
            "message": {
                "role": "assistant",
                "content": "",
                "tool_calls": [{"function": {"name": "lookup_cost", "arguments": {"item_name": "chair"}}}],
            },
            "prompt_eval_count": 30,
            "eval_count": 5,
        })
        self.provider = OllamaProvider("llama3.2:3b", client=SimpleNamespace(chat=self.chat))

    @pytest.mark.asyncio
    async def test_complete_generates_call_ids(self):
        completion = await self.provider.complete("preamble", [SPEC], [], Message.user("hi"))

        call = completion.tool_calls[0]
        assert call.id.startswith("call_")
        assert call.arguments == {"item_name": "chair"}
        assert completion.input_tokens == 30
        assert self.chat.kwargs["options"]["num_predict"] == 1024

    @pytest.mark.asyncio
    async def test_error_wrapped(self):
        self.chat.response = ConnectionError("connection refused")

        with pytest.raises(ProviderError):
            await self.provider.complete("p", [], [], Message.user("hi"))

    def test_malformed_response(self):
        with pytest.raises(ProviderError):
            self.provider.parse_response({"unexpected": True})

    def test_rounds_in_call_order(self):
        messages = self.provider.build_messages("p", [], Message.user("hi"), [ROUND])

        tool_messages = [m for m in messages if m["role"] == "tool"]
        assert [m["content"] for m in tool_messages] == ["boom", "vase: 45"]

    def test_multimodal_parts(self):
        wire = self.provider.message_to_wire(MIXED)

        assert wire["images"] == ["cG5n"]
        assert "a,b" in wire["content"]
        assert "application/pdf" in wire["content"]
        assert wire["content"].endswith("What is this?")


class TestGeminiProvider:
    """Test cases for the Gemini adapter."""

    def setup_method(self):
        self.generate = FakeCreate(SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[
                SimpleNamespace(text="Checking costs.", function_call=None),
                SimpleNamespace(text=None, function_call=SimpleNamespace(
                    id=None, name="lookup_cost", args={"item_name": "mirror"},
                )),
            ]))],
            usage_metadata=SimpleNamespace(prompt_token_count=15, candidates_token_count=6),
        ))
        client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=self.generate)))
        self.provider = GeminiProvider("gemini-1.5-flash-002", client=client)

    @pytest.mark.asyncio
    async def test_complete(self):
        """Test text and function calls are parsed and ids generated when missing."""
        completion = await self.provider.complete("preamble", [SPEC], [], Message.user("hi"))

        assert completion.text == "Checking costs."
        call = completion.tool_calls[0]
        assert call.id.startswith("call_")
        assert call.name == "lookup_cost"
        assert call.arguments == {"item_name": "mirror"}
        assert completion.input_tokens == 15
        assert completion.output_tokens == 6

        config = self.generate.kwargs["config"]
        assert config.system_instruction == "preamble"
        assert config.automatic_function_calling.disable is True
        declaration = config.tools[0].function_declarations[0]
        assert declaration.name == "lookup_cost"
        assert declaration.parameters_json_schema == SPEC.parameters

    @pytest.mark.asyncio
    async def test_no_tools_without_specs(self):
        await self.provider.complete("preamble", [], [], Message.user("hi"))

        assert not self.generate.kwargs["config"].tools

    @pytest.mark.asyncio
    async def test_error_wrapped(self):
        self.generate.response = RuntimeError("API key not valid")

        with pytest.raises(ProviderError):
            await self.provider.complete("p", [], [], Message.user("hi"))

    def test_issued_call_id_kept(self):
        response = SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[
                SimpleNamespace(text=None, function_call=SimpleNamespace(id="fc_7", name="t", args=None)),
            ]))],
            usage_metadata=None,
        )

        completion = self.provider.parse_response(response)

        assert completion.tool_calls == (ToolCall(id="fc_7", name="t", arguments={}),)
        assert completion.input_tokens is None

    def test_no_candidates(self):
        with pytest.raises(ProviderError):
            self.provider.parse_response(SimpleNamespace(candidates=[], usage_metadata=None))

    def test_rounds_as_function_responses(self):
        contents = self.provider.build_contents([Message.assistant("earlier")], Message.user("hi"), [ROUND])

        assert [content.role for content in contents] == ["model", "user", "model", "user"]
        model_parts = contents[2].parts
        assert model_parts[0].text == "Let me check."
        assert [part.function_call.id for part in model_parts[1:]] == ["a", "b"]
        responses = [part.function_response for part in contents[3].parts]
        assert [r.id for r in responses] == ["a", "b"]
        assert responses[0].response == {"error": "boom"}
        assert responses[1].response == {"output": "vase: 45"}

    def test_multimodal_parts(self):
        content = self.provider.message_to_wire(MIXED)

        parts = content.parts
        assert content.role == "user"
        assert parts[0].inline_data.mime_type == "image/png"
        assert parts[0].inline_data.data == b"png"
        assert parts[1].inline_data.mime_type == "application/pdf"
        assert "a,b" in parts[2].text
        assert parts[3].inline_data.mime_type == "image/heic"
        assert parts[4].text == "What is this?"

    def test_gif_replaced_by_notice(self):
        message = Message(
            role=MessageRole.USER,
            parts=(ImagePart(data=b"GIF89a", kind=ImageKind.GIF), TextPart("Look")),
        )

        parts = self.provider.message_to_wire(message).parts

        assert parts[0].inline_data is None
        assert "image/gif" in parts[0].text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
