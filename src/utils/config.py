"""Configuration management using environment variables and pydantic."""

from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Model selection ("<provider>:<model>", provider is ollama, openai, anthropic or gemini)
    orchestrator_model: str = "ollama:llama3.2:3b"
    address_specialist_model: str = "ollama:llama3.2:3b"
    damage_specialist_model: str = "ollama:llama3.2:3b"
    dummy_specialist_model: str = "ollama:llama3.2:3b"

    # Provider Configuration
    ollama_base_url: str = "http://localhost:11434"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""

    # Response Configuration
    max_response_tokens: int = 1024
    response_temperature: float = 0.3

    # Delegation Configuration
    max_tool_rounds: int = 5
    request_timeout_seconds: float = 60.0
    register_dummy_specialist: bool = True

    # Request Limits
    max_prompt_chars: int = 10_000
    max_files_per_request: int = 10
    max_file_size_bytes: int = 20 * 1024 * 1024  # base64 text length

    # Session Configuration
    session_max_turns: int = 50

    # Geocoding Configuration
    geocoding_base_url: str = "https://nominatim.openstreetmap.org"
    geocoding_user_agent: str = "DeliveryAssistant/1.0"
    geocoding_timeout_seconds: float = 10.0

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_allow_origins: List[str] = ["*"]

    # Logging Configuration
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file_path: str = ""
    log_max_size_mb: int = 100
    log_backup_count: int = 5


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
