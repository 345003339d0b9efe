"""Configuration using pydantic-settings."""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from .core.fetcher import DEFAULT_USER_AGENT, MAX_CONTENT_BYTES, MIN_CONTENT_LENGTH
from .core.proxy_fetcher import DEFAULT_PROXY_URL


class ChatSettings(BaseSettings):
    """Chat proxy configuration, read once at process start."""

    # Completion provider
    provider: Literal["openai", "anthropic"] = "openai"
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("AVACHAT_OPENAI_API_KEY", "OPENAI_API_KEY", "avachat"),
    )
    openai_base_url: str = "https://api.openai.com/v1"
    anthropic_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("AVACHAT_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )
    model: str | None = None
    max_tokens: int = 300
    temperature: float = 0.7
    history_limit: int = Field(default=10, ge=1, le=50)

    # Site analysis
    site_analysis: bool = True
    fetch_strategy: Literal["direct", "proxy"] = "direct"
    fetch_timeout: float = Field(default=10.0, ge=1.0, le=15.0)
    min_content_length: int = MIN_CONTENT_LENGTH
    max_content_bytes: int = MAX_CONTENT_BYTES
    user_agent: str = DEFAULT_USER_AGENT
    proxy_base_url: str = DEFAULT_PROXY_URL
    proxy_api_key: str = ""
    # Lets the fetcher reach loopback and private networks (local development)
    allow_private_addresses: bool = False

    # HTTP surface
    allowed_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "AVACHAT_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }


settings = ChatSettings()
