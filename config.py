"""
Configuration module - loads settings from .env file
"""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Inference service (OpenAI-compatible chat completions)
    openai_api_key: str = Field(default="")
    inference_base_url: str = Field(default="https://api.openai.com/v1")
    default_model: str = Field(default="gpt-4o-mini")
    inference_temperature: float = Field(default=0.1)
    inference_timeout_seconds: int = Field(default=120)
    inference_max_retries: int = Field(default=3)

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    log_level: str = Field(default="INFO")

    # Browser context
    viewport_width: int = Field(default=1440)
    viewport_height: int = Field(default=2000)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)

    # Navigation timeouts (ms)
    navigation_timeout_ms: int = Field(default=180000)
    network_idle_timeout_ms: int = Field(default=30000)
    settle_idle_timeout_ms: int = Field(default=20000)
    root_navigation_timeout_ms: int = Field(default=60000)
    hash_settle_ms: int = Field(default=800)

    # Call-to-action prompts
    coax_visible_timeout_ms: int = Field(default=600)
    coax_click_timeout_ms: int = Field(default=1500)
    coax_settle_ms: int = Field(default=400)

    # Root-page fallback links
    fallback_visible_timeout_ms: int = Field(default=1200)
    fallback_click_timeout_ms: int = Field(default=2000)
    fallback_settle_ms: int = Field(default=600)

    # Progressive scrolling
    scroll_step_px: int = Field(default=1000)
    scroll_delay_ms: int = Field(default=300)
    scroll_max_steps: int = Field(default=80)
    fallback_scroll_delay_ms: int = Field(default=250)
    fallback_scroll_max_steps: int = Field(default=50)

    # Sufficiency check (empirically tuned)
    min_content_chars: int = Field(default=200)
    no_content_phrases: List[str] = Field(
        default_factory=lambda: ["doesn't currently have any products"]
    )

    # Screenshot tiling
    tile_max_height: int = Field(default=2800)


settings = Settings()
