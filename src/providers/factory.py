"""Provider selection from '<provider>:<model>' strings."""

from typing import Dict, Optional, Tuple

from src.providers.base import CompletionProvider, ProviderConfigError
from src.utils.config import Settings, get_settings
from src.utils.logger import get_logger

logger = get_logger()

SUPPORTED_PROVIDERS = ("ollama", "openai", "anthropic", "gemini")


def parse_model_spec(spec: str) -> Tuple[str, str]:
    """
    Split a model string into provider and model name.

    Only the first colon separates the provider, so Ollama tags such as
    'ollama:llama3.2:3b' keep their own colon.

    Args:
        spec: Model string, e.g. 'openai:gpt-4o'

    Returns:
        Tuple of (provider, model)
    """
    provider, sep, model = spec.partition(":")
    provider = provider.strip().lower()
    model = model.strip()

    if not sep or not model:
        raise ProviderConfigError(f"Invalid model spec {spec!r}, expected '<provider>:<model>'")
    if provider not in SUPPORTED_PROVIDERS:
        raise ProviderConfigError(
            f"Unknown provider {provider!r} in {spec!r}. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    return provider, model


def create_provider(spec: str, settings: Optional[Settings] = None) -> CompletionProvider:
    """Build a new provider for a model string."""
    settings = settings or get_settings()
    provider, model = parse_model_spec(spec)
    common = {
        "temperature": settings.response_temperature,
        "max_tokens": settings.max_response_tokens,
    }

    if provider == "ollama":
        from src.providers.ollama_provider import OllamaProvider
        return OllamaProvider(model, host=settings.ollama_base_url, **common)

    if provider == "openai":
        if not settings.openai_api_key:
            raise ProviderConfigError(f"OPENAI_API_KEY is required for {spec!r}")
        from src.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(model, api_key=settings.openai_api_key, **common)

    if provider == "gemini":
        if not settings.gemini_api_key:
            raise ProviderConfigError(f"GEMINI_API_KEY is required for {spec!r}")
        from src.providers.gemini_provider import GeminiProvider
        return GeminiProvider(model, api_key=settings.gemini_api_key, **common)

    if not settings.anthropic_api_key:
        raise ProviderConfigError(f"ANTHROPIC_API_KEY is required for {spec!r}")
    from src.providers.anthropic_provider import AnthropicProvider
    return AnthropicProvider(model, api_key=settings.anthropic_api_key, **common)


def _cache_key(spec: str, settings: Settings) -> Tuple:
    """Model string plus every setting a provider is built from."""
    return (
        spec,
        settings.ollama_base_url,
        settings.openai_api_key,
        settings.anthropic_api_key,
        settings.gemini_api_key,
        settings.response_temperature,
        settings.max_response_tokens,
    )


# Shared provider handles, one per model string and provider configuration
_providers: Dict[Tuple, CompletionProvider] = {}


def get_provider(spec: str, settings: Optional[Settings] = None) -> CompletionProvider:
    """Get or create the shared provider for a model string."""
    settings = settings or get_settings()
    spec = spec.strip()
    key = _cache_key(spec, settings)
    if key not in _providers:
        _providers[key] = create_provider(spec, settings)
        logger.info(f"Created provider {_providers[key]!r} for '{spec}'")
    return _providers[key]
