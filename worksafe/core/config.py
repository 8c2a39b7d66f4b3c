"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    app_name: str = "WorkSafe Vision"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Vision model provider Settings
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_base_url: Optional[str] = None
    image_detail: str = "high"  # OpenAI image_url detail hint

    # LLM Settings
    llm_temperature: float = 0.1  # Low temperature for consistent analysis
    llm_max_tokens: int = 1000

    # Photo Upload Settings
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    accepted_image_types: List[str] = [
        "image/jpeg",
        "image/png",
        "image/webp",
    ]

    # Localization Settings
    supported_locales: List[str] = ["en", "tr"]
    default_locale: str = "en"

    # Client Settings
    relay_url: str = "http://localhost:8000"
    relay_timeout: Optional[float] = None  # seconds; None waits as long as the relay does

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
