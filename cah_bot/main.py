"""
Fill-in-the-Blank Bot Main Application

This is the main entry point for the card game bot. It loads the deck,
creates the game manager, registers handlers and starts polling.
"""

import asyncio
import sys
from typing import Optional

from telegram import Update, BotCommand
from telegram.constants import ParseMode
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, Defaults

from .game.deck import Deck, load_deck
from .game.game_manager import GameManager
from .handlers.cah_handlers import (
    CARD_CALLBACK, PICK_CALLBACK, HELP_TEXT, cah_command, handle_card_pick,
    handle_judge_pick, make_round_complete_announcer,
)
from .handlers.error_handlers import error_handler
from .utils.config import get_settings
from .utils.logging_config import setup_logging, get_logger

# Setup logging first
setup_logging()
logger = get_logger(__name__)


async def help_command(update: Update, context) -> None:
    """Handle /help and /start in any chat."""
    if update.message:
        await update.message.reply_text(HELP_TEXT)


class CardGameBot:
    """
    Main bot application class.

    This handles the complete lifecycle of the bot including:
    - Loading the deck and creating the game manager
    - Handler registration
    - Application startup and shutdown
    """

    def __init__(self, deck: Optional[Deck] = None):
        """Initialize the bot application."""
        self.settings = get_settings()
        self.deck = deck
        self.game_manager: Optional[GameManager] = None
        self.application: Optional[Application] = None

    def initialize_game(self) -> GameManager:
        """Load the deck once and create the process-wide game manager."""
        if self.deck is None:
            self.deck = load_deck(self.settings.deck_path)
        self.game_manager = GameManager(self.deck)
        return self.game_manager

    async def setup_bot_commands(self) -> None:
        """Set up the command menu that appears when users type '/'."""
        if not self.application:
            raise RuntimeError("Application not initialized")

        commands = [
            BotCommand("cah", "Play: start, join, leave, hand, round, play, scores, solo, status"),
            BotCommand("help", "How to play"),
        ]
        try:
            await self.application.bot.set_my_commands(commands)
            logger.info(f"Bot commands menu configured with {len(commands)} commands")
        except Exception as e:
            logger.error(f"Failed to set bot commands: {e}")
            # Don't raise - this is not critical for bot operation

    def setup_handlers(self) -> None:
        """Register command, callback and error handlers."""
        if not self.application or not self.game_manager:
            raise RuntimeError("Application not initialized")

        logger.info("Setting up bot handlers...")

        self.application.bot_data["game_manager"] = self.game_manager
        self.game_manager.add_round_complete_listener(
            make_round_complete_announcer(self.application)
        )

        self.application.add_handler(CommandHandler("cah", cah_command))
        self.application.add_handler(CommandHandler(["help", "start"], help_command))
        self.application.add_handler(
            CallbackQueryHandler(handle_card_pick, pattern=rf"^{CARD_CALLBACK}\|")
        )
        self.application.add_handler(
            CallbackQueryHandler(handle_judge_pick, pattern=rf"^{PICK_CALLBACK}\|")
        )
        self.application.add_error_handler(error_handler)

        logger.info("All handlers registered successfully")


async def main() -> None:
    """
    Main entry point for the bot.

    Creates and starts the bot application, handling startup errors.
    """
    bot = CardGameBot()

    try:
        logger.info("Starting card game bot")

        if not bot.settings.telegram_bot_token:
            logger.error("TELEGRAM_BOT_TOKEN is not set")
            sys.exit(1)

        bot.initialize_game()

        defaults = Defaults(parse_mode=ParseMode.HTML)
        bot.application = (
            Application.builder()
            .token(bot.settings.telegram_bot_token)
            .defaults(defaults)
            .build()
        )

        bot.setup_handlers()

        logger.info("Bot initialization complete, starting polling...")
        async with bot.application:
            await bot.setup_bot_commands()
            await bot.application.start()
            await bot.application.updater.start_polling(
                allowed_updates=Update.ALL_TYPES,
                drop_pending_updates=True
            )

            # Keep running until interrupted
            try:
                await asyncio.Event().wait()
            except (KeyboardInterrupt, SystemExit):
                logger.info("Received shutdown signal")
            finally:
                await bot.application.updater.stop()
                await bot.application.stop()

    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
    except Exception as e:
        logger.error(f"Unexpected error in main: {e}")
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot stopped by user")
