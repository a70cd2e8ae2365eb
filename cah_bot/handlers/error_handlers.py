"""
Error Handlers

This module handles errors that escape the command and callback handlers.
It logs them and gives the user a short message so the chat never goes
silent; game sessions are left untouched and stay playable.
"""

import html
import traceback
from telegram import Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from ..utils.logging_config import get_logger
from ..utils.config import is_development

# Logger setup
logger = get_logger(__name__)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle errors that occur during bot operation.

    In development the error text is echoed back to the chat; in
    production a generic message is sent instead.

    Args:
        update: Telegram update object (may be None)
        context: Bot context containing error information
    """
    error = context.error
    error_message = str(error) if error else "Unknown error"

    user_id = None
    chat_id = None

    if isinstance(update, Update):
        if update.effective_user:
            user_id = update.effective_user.id
        if update.effective_chat:
            chat_id = update.effective_chat.id

    update_type = type(update).__name__ if update else None
    tb = "".join(traceback.format_exception(type(error), error, error.__traceback__)) if error else None
    logger.error(
        f"Bot error occurred - error_message={error_message}, user_id={user_id}, "
        f"chat_id={chat_id}, update_type={update_type}, traceback={tb}"
    )

    if not chat_id:
        return

    if is_development():
        error_text = (
            "🐛 <b>Development Error</b>\n\n"
            f"An error occurred: <code>{html.escape(error_message)}</code>\n\n"
            "This detailed message is only shown in development mode."
        )
    else:
        error_text = (
            "⚠️ <b>Something went wrong</b>\n\n"
            "I couldn't process that. The game is still running, please try again."
        )

    try:
        await context.bot.send_message(chat_id=chat_id, text=error_text)
    except TelegramError as send_error:
        # If we can't even send an error message, log it
        logger.error(
            f"Failed to send error message to user - original_error={error_message}, "
            f"send_error={str(send_error)}, chat_id={chat_id}"
        )
