"""
Fill-in-the-Blank Card Game Bot Package

This package contains the bot application including:
- The game engine (card piles, hands, sessions, rounds, scoring)
- Command and callback handlers for Telegram
- Configuration and logging utilities
"""

__version__ = "1.0.0"

# Package imports for easier access
from .main import main
from .utils.config import get_settings

__all__ = ["main", "get_settings"]
