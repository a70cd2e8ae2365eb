"""
Logging Configuration

This module sets up logging for the application and provides
small helpers for auditing player actions and game events.
"""

import logging
import sys

from .config import get_settings


def resolve_log_level(settings) -> int:
    """DEBUG=true forces debug output; otherwise the level named by LOG_LEVEL (INFO if unknown)."""
    if settings.debug:
        return logging.DEBUG
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def setup_logging() -> None:
    """
    Set up basic logging configuration.

    Output goes to stdout at the level picked by resolve_log_level().
    """
    settings = get_settings()

    logging.basicConfig(
        level=resolve_log_level(settings),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Polling produces a request log line every few seconds
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("telegram").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging configuration initialized")


def get_logger(name: str):
    """
    Get a configured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)


def log_user_action(user_id, action: str, **kwargs) -> None:
    """
    Log user actions for auditing.

    Args:
        user_id: Telegram user ID
        action: Action description
        **kwargs: Additional context data
    """
    logger = get_logger("user_actions")
    extra_info = " ".join([f"{k}={v}" for k, v in kwargs.items()])
    logger.debug(f"User action: user_id={user_id} action={action} {extra_info}")


def log_game_event(channel_id, event_type: str, **kwargs) -> None:
    """
    Log game-related events for debugging.

    Args:
        channel_id: Channel (chat) the session belongs to
        event_type: Type of game event
        **kwargs: Additional event data
    """
    logger = get_logger("game_events")
    extra_info = " ".join([f"{k}={v}" for k, v in kwargs.items()])
    logger.debug(f"Game event: channel_id={channel_id} event_type={event_type} {extra_info}")
