"""Error handling module for the media relay bot.

Provides centralized error handling at the handler boundary: errors are
logged in full and turned into a single user-friendly message in
Indonesian. Nothing raised while handling one update stops the bot.
"""
import logging
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from mediabot.extraction import MediaBotError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Terjadi kesalahan pada bot. Silakan coba lagi nanti."


def get_user_message(error: BaseException) -> str:
    """Return the user-facing text for an error."""
    if isinstance(error, MediaBotError):
        return error.to_user_message()
    return DEFAULT_ERROR_MESSAGE


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors that escaped a handler.

    Logs the full error for debugging and sends an appropriate
    message to the user if the update came from a chat.

    Args:
        update: Telegram update object (may be None or not an Update)
        context: Telegram context object containing the error
    """
    error = context.error
    user_id = "unknown"
    if isinstance(update, Update) and update.effective_user:
        user_id = update.effective_user.id

    logger.error(f"Bot error handling update for user {user_id}: {error}", exc_info=error)

    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text(get_user_message(error))
        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")


async def reply_with_error(
    message,
    error: BaseException,
    user_message: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> None:
    """Send one error notice for a failure handled inside a handler.

    Args:
        message: Telegram message to reply to
        error: The exception that occurred
        user_message: Text overriding the error's own user message
        correlation_id: Optional correlation ID for request tracing
    """
    cid = correlation_id or "no-cid"
    try:
        await message.reply_text(user_message or get_user_message(error))
    except Exception as e:
        logger.error(f"[{cid}] Failed to send error message: {e}")


def log_unhandled_loop_exception(loop, context: dict) -> None:
    """asyncio exception handler: log errors of orphaned tasks, keep running."""
    error = context.get("exception")
    logger.error(f"Unhandled asyncio error: {context.get('message')}", exc_info=error)
