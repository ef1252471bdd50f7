"""Telegram Bot API wrapper.

Wraps the python-telegram-bot ``Bot`` so that every outbound call returns an
explicit result instead of raising: platform failures are logged and turned
into ``TelegramResult(ok=False, error=...)``. Outgoing text is truncated to
Telegram's limits here. Raw file downloads go straight to the file server
over aiohttp so the size ceiling can be enforced while streaming.
"""

import logging
from collections.abc import Awaitable, Sequence
from typing import Any

import aiohttp
from pydantic import BaseModel
from telegram import Bot, BotCommand, InlineKeyboardMarkup, InputMediaPhoto
from telegram.error import TelegramError

from ..bot.utils import truncate_text
from ..config import LimitsConfig

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message", "callback_query"]
DOWNLOAD_CHUNK_SIZE = 64 * 1024


class TelegramResult(BaseModel):
    """Outcome of one Bot API call."""

    ok: bool
    error: str | None = None


class MediaTooLargeError(Exception):
    """Downloaded file exceeded the media ceiling."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"File exceeds {limit} bytes")


class TelegramClient:
    """Non-raising facade over the Telegram Bot API."""

    def __init__(self, bot: Bot, limits: LimitsConfig, timeout: int = 20):
        """Initialize the client.

        Args:
            bot: python-telegram-bot Bot instance.
            limits: Text and media ceilings.
            timeout: Download timeout in seconds.
        """
        self.bot = bot
        self.limits = limits
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def _call(self, method: str, call: Awaitable[Any]) -> TelegramResult:
        try:
            await call
            return TelegramResult(ok=True)
        except TelegramError as e:
            logger.warning(f"Telegram {method} failed: {e}")
            return TelegramResult(ok=False, error=str(e))

    async def send_message(
        self, chat_id: int, text: str, reply_markup: InlineKeyboardMarkup | None = None
    ) -> TelegramResult:
        """Send a plain text message, truncated to the message ceiling."""
        return await self._call(
            "sendMessage",
            self.bot.send_message(
                chat_id=chat_id,
                text=truncate_text(text, self.limits.max_message_len),
                reply_markup=reply_markup,
            ),
        )

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> TelegramResult:
        """Replace the text and keyboard of an existing message."""
        return await self._call(
            "editMessageText",
            self.bot.edit_message_text(
                text=truncate_text(text, self.limits.max_message_len),
                chat_id=chat_id,
                message_id=message_id,
                reply_markup=reply_markup,
            ),
        )

    async def send_media_group(
        self, chat_id: int, photo_urls: Sequence[str], caption: str | None = None
    ) -> TelegramResult:
        """Send photos as one album, captioning the first one."""
        media = [
            InputMediaPhoto(
                media=url,
                caption=truncate_text(caption, self.limits.max_caption_len)
                if caption and index == 0
                else None,
            )
            for index, url in enumerate(photo_urls)
        ]
        return await self._call(
            "sendMediaGroup", self.bot.send_media_group(chat_id=chat_id, media=media)
        )

    async def send_photo(
        self, chat_id: int, photo_url: str, caption: str | None = None
    ) -> TelegramResult:
        """Send a single photo by URL."""
        return await self._call(
            "sendPhoto",
            self.bot.send_photo(
                chat_id=chat_id,
                photo=photo_url,
                caption=truncate_text(caption, self.limits.max_caption_len) if caption else None,
            ),
        )

    async def answer_callback(self, callback_id: str, text: str = "") -> TelegramResult:
        """Acknowledge an inline button press, optionally with a toast."""
        return await self._call(
            "answerCallbackQuery",
            self.bot.answer_callback_query(
                callback_query_id=callback_id, text=text or None, show_alert=False
            ),
        )

    async def set_webhook(self, url: str) -> TelegramResult:
        """Register the webhook URL for message and callback updates."""
        return await self._call(
            "setWebhook", self.bot.set_webhook(url=url, allowed_updates=ALLOWED_UPDATES)
        )

    async def set_commands(self, commands: Sequence[tuple[str, str]]) -> TelegramResult:
        """Register the command menu shown by Telegram clients."""
        return await self._call(
            "setMyCommands",
            self.bot.set_my_commands(
                commands=[BotCommand(command, description) for command, description in commands]
            ),
        )

    async def get_file_path(self, file_id: str) -> str | None:
        """Resolve a file id to a downloadable path or URL.

        Returns:
            File path as reported by Telegram, None if it could not be resolved.
        """
        try:
            file = await self.bot.get_file(file_id)
        except TelegramError as e:
            logger.warning(f"Telegram getFile failed for {file_id}: {e}")
            return None
        return file.file_path or None

    def _file_url(self, file_path: str) -> str:
        if file_path.startswith(("http://", "https://")):
            return file_path
        return f"https://api.telegram.org/file/bot{self.bot.token}/{file_path}"

    async def download_file(self, file_path: str) -> tuple[bytes, str | None] | None:
        """Download a file from the Telegram file server.

        The ceiling is checked against Content-Length first and again while
        streaming, so oversized files are never fully buffered.

        Args:
            file_path: Path returned by get_file_path.

        Returns:
            Tuple (data, content_type header) or None if the download failed.

        Raises:
            MediaTooLargeError: If the file exceeds the media ceiling.
        """
        limit = self.limits.max_media_bytes
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(self._file_url(file_path)) as response:
                    if response.status != 200:
                        logger.warning(f"File download failed with HTTP {response.status}")
                        return None
                    if response.content_length and response.content_length > limit:
                        raise MediaTooLargeError(response.content_length, limit)

                    chunks: list[bytes] = []
                    total = 0
                    async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                        total += len(chunk)
                        if total > limit:
                            raise MediaTooLargeError(total, limit)
                        chunks.append(chunk)
                    return b"".join(chunks), response.headers.get("Content-Type")
        except aiohttp.ClientError as e:
            logger.warning(f"File download failed: {e}")
            return None
