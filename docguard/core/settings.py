from typing import Any, Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .renderer import DEFAULT_TEMPLATE

DEFAULT_POLICY_FILENAME = "documentation-standard.md"
DEFAULT_MODEL = "qwen2.5-coder:7b"
DEFAULT_PROVIDER = "ollama"


class Settings(BaseSettings):
    """
    Resolved once at startup: built-in defaults, then DOCGUARD_* environment
    variables, then command-line flags. Components receive this object; nothing
    reads the environment after it is built.
    """
    model_config = SettingsConfigDict(env_prefix="DOCGUARD_", extra="ignore")

    policy_path: str = Field(DEFAULT_POLICY_FILENAME, description="Documentation standard (the policy document).")
    template_path: str = Field(DEFAULT_TEMPLATE, description="Jinja2 prompt template.")
    provider: Literal["ollama", "openai", "anthropic", "gemini", "local"] = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: float = Field(0.1, ge=0.0, le=2.0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


def resolve_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """Flags that were not given (None) fall through to the environment and defaults."""
    explicit = {k: v for k, v in (overrides or {}).items() if v is not None}
    return Settings(**explicit)
