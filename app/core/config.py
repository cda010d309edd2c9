"""Application configuration."""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 30.0
    chat_temperature: float = 0.7
    chat_max_tokens: int = 1000
    selection_max_tokens: int = 500
    narration_max_tokens: int = 500

    # Restaurant
    restaurant_name: str = "Restaurant"
    menu_file: Optional[str] = None  # Falls back to the bundled sample menu

    # Conversation pacing
    thinking_delay_seconds: float = 1.5

    # Recommendation fallbacks (catalog ids)
    default_combo_ids: List[str] = [
        "hongshaorou-quail-eggs",
        "gongbao-chicken",
        "tomato-egg-stirfry",
        "rice",
        "tomato-egg-soup",
        "steamed-egg",
    ]
    classic_combo_ids: List[str] = [
        "hongshaorou-quail-eggs",
        "tomato-egg-stirfry",
        "rice",
        "tomato-egg-soup",
    ]

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
