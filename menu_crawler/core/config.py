"""
Crawler configuration using Pydantic settings
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Crawler settings from environment variables"""

    # Test mode
    test_mode: bool = False
    max_products: int = 3
    max_requests: int = 10

    # Logging
    log_level: str = "INFO"

    # Output
    output_dir: Path = Path("crawler-outputs")

    # Extra YAML site definitions
    sites_dir: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="CRAWLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
