"""
Configuration Management

This module handles all application configuration using environment variables.
Values are read once from the process environment (and a local .env file).
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Deck shipped with the package, used when DECK_PATH is not set
DEFAULT_DECK_PATH = Path(__file__).resolve().parent.parent / "data" / "deck.json"


class Settings:
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    """

    def __init__(self):
        # Telegram Bot Configuration
        self.telegram_bot_token: str = os.getenv('TELEGRAM_BOT_TOKEN', '')

        # Deck Configuration
        deck_path: Optional[str] = os.getenv('DECK_PATH')
        self.deck_path: Path = Path(deck_path) if deck_path else DEFAULT_DECK_PATH

        # Application Settings
        self.debug: bool = os.getenv('DEBUG', 'false').lower() == 'true'
        self.log_level: str = os.getenv('LOG_LEVEL', 'INFO').split('#')[0].strip()
        self.environment: str = os.getenv('ENVIRONMENT', 'development')


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching.

    Uses LRU cache to avoid reloading settings on every call.
    Cache is cleared when the process restarts.

    Returns:
        Settings: Application configuration settings
    """
    return Settings()


def is_development() -> bool:
    """
    Check if running in development environment.

    Returns:
        bool: True if in development, False otherwise
    """
    settings = get_settings()
    return settings.environment.lower() in ["development", "dev", "local"]

