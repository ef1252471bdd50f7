"""Telegram bot handlers.

Thin python-telegram-bot callbacks that normalize the update and delegate to
the MessagePipeline stored in ``application.bot_data``.
"""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from .parsing import parse_message
from .pipeline import MessagePipeline

logger = logging.getLogger(__name__)

PIPELINE_KEY = "pipeline"


def _pipeline(context: ContextTypes.DEFAULT_TYPE) -> MessagePipeline:
    return context.bot_data[PIPELINE_KEY]


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start and /help commands.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    if update.effective_chat:
        await _pipeline(context).send_help(update.effective_chat.id)


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /list command by showing the newest page of memos."""
    if update.effective_chat:
        await _pipeline(context).show_first_page(update.effective_chat.id)


async def handle_content(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Store any other message as a memo.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    if not update.message:
        return

    pipeline = _pipeline(context)
    message = parse_message(update.message, pipeline.limits.max_media_bytes)
    await pipeline.handle_content(message)


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle inline keyboard button presses."""
    if update.callback_query:
        await _pipeline(context).handle_callback(update.callback_query)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log exceptions that escaped a handler."""
    logger.error(f"Unhandled error while processing update {update}: {context.error}")
