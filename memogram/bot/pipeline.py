"""Processing of incoming messages and inline button presses.

The pipeline is the single place where a normalized message turns into a
memo: it builds the Markdown body, resolves the target memo (album aware),
downloads and attaches media, and reports the outcome to the chat. Button
presses are decoded and dispatched to the pagination controller.
"""

import logging

from telegram import CallbackQuery

from ..config import LimitsConfig
from ..models import DownloadedFile, IncomingMessage, MediaRef, memo_name_from_id
from ..services.content_type import resolve_content_type
from ..services.memos import MemosClient
from ..services.telegram import MediaTooLargeError, TelegramClient
from .albums import AlbumDeduplicator
from .callback_codec import DetailAction, ListAction, PinAction, VisibilityAction, decode_callback
from .formatting import build_message_content
from .messages import (
    ACTION_EXPIRED,
    ACTION_FAILED,
    DOWNLOAD_FAILED_MESSAGE,
    EMPTY_MEMO_MESSAGE,
    FILE_TOO_LARGE_MESSAGE,
    HELP_MESSAGE,
    INVALID_ACTION,
    PINNED_ANSWER,
    SAVE_FAILED_MESSAGE,
    SAVED_MEMO_MESSAGE,
    UNKNOWN_ERROR,
    UNPINNED_ANSWER,
    VISIBILITY_CHANGED,
)
from .pagination import PaginationController

logger = logging.getLogger(__name__)


class MessagePipeline:
    """Turns Telegram updates into Memos operations."""

    def __init__(
        self,
        telegram: TelegramClient,
        memos: MemosClient,
        deduplicator: AlbumDeduplicator,
        pagination: PaginationController,
        limits: LimitsConfig,
    ):
        """Initialize the pipeline.

        Args:
            telegram: Telegram API client.
            memos: Memos API client.
            deduplicator: Album-aware memo resolver.
            pagination: Memo list and detail renderer.
            limits: Media and text ceilings.
        """
        self.telegram = telegram
        self.memos = memos
        self.deduplicator = deduplicator
        self.pagination = pagination
        self.limits = limits

    @property
    def limit_mb(self) -> int:
        return self.limits.max_media_bytes // (1024 * 1024)

    async def send_help(self, chat_id: int) -> None:
        await self.telegram.send_message(chat_id, HELP_MESSAGE)

    async def show_first_page(self, chat_id: int) -> None:
        """Send the newest page of memos."""
        try:
            await self.pagination.show_list(chat_id)
        except Exception as e:
            logger.error(f"Failed to list memos: {e}")
            error = str(e) or UNKNOWN_ERROR
            await self.telegram.send_message(chat_id, ACTION_FAILED.format(error=error))

    async def handle_content(self, message: IncomingMessage) -> None:
        """Store a message as a memo and report the result to the chat.

        Args:
            message: Normalized incoming message.
        """
        chat_id = message.chat_id
        content = build_message_content(message)
        if not content and not message.media:
            await self.telegram.send_message(chat_id, EMPTY_MEMO_MESSAGE)
            return

        try:
            target = await self.deduplicator.resolve(message, content)
            memo = target["memo"]
            for media in message.media:
                await self._attach_media(chat_id, memo.name, media)

            if target["should_notify"]:
                link = self.memos.memo_link(memo.name)
                await self.telegram.send_message(chat_id, SAVED_MEMO_MESSAGE.format(link=link))
                await self.deduplicator.mark_notified(target)
        except Exception as e:
            logger.error(f"Failed to save memo for chat {chat_id}: {e}")
            error = str(e) or UNKNOWN_ERROR
            await self.telegram.send_message(chat_id, SAVE_FAILED_MESSAGE.format(error=error))

    async def _attach_media(self, chat_id: int, memo_name: str, media: MediaRef) -> None:
        """Download one file and attach it, warning the chat on per-file failures.

        Raises:
            MemosAPIError: If the attachment could not be created.
        """
        too_large = FILE_TOO_LARGE_MESSAGE.format(label=media.label, limit_mb=self.limit_mb)
        if media.size and media.size > self.limits.max_media_bytes:
            logger.warning(f"Skipping {media.label}: declared size {media.size} bytes")
            await self.telegram.send_message(chat_id, too_large)
            return

        downloaded = None
        file_path = await self.telegram.get_file_path(media.file_id)
        if file_path:
            try:
                downloaded = await self.telegram.download_file(file_path)
            except MediaTooLargeError as e:
                logger.warning(f"Skipping {media.label}: {e}")
                await self.telegram.send_message(chat_id, too_large)
                return

        if downloaded is None:
            await self.telegram.send_message(
                chat_id, DOWNLOAD_FAILED_MESSAGE.format(label=media.label)
            )
            return

        data, declared_type = downloaded
        file = DownloadedFile(
            filename=media.filename or media.label,
            content_type=resolve_content_type(declared_type, media.mime_type, data),
            content=data,
        )
        await self.memos.create_attachment(memo_name, file)

    async def handle_callback(self, query: CallbackQuery) -> None:
        """Run the action behind an inline button press and answer it.

        Args:
            query: Callback query delivered by Telegram.
        """
        message = query.message
        if message is None:
            logger.debug(f"Ignoring callback {query.id} without message")
            return

        chat_id = message.chat.id
        message_id = message.message_id
        action = decode_callback(query.data) if query.data else None
        if action is None:
            await self.telegram.answer_callback(query.id, INVALID_ACTION)
            return

        try:
            if isinstance(action, ListAction):
                await self.pagination.show_list(
                    chat_id, action.token or "", action.history, message_id
                )
                await self.telegram.answer_callback(query.id)
                return

            if not action.memo_id:
                await self.telegram.answer_callback(query.id, ACTION_EXPIRED)
                return
            memo_name = memo_name_from_id(action.memo_id)

            if isinstance(action, DetailAction):
                await self.pagination.show_detail(chat_id, memo_name, message_id)
                await self.telegram.answer_callback(query.id)
            elif isinstance(action, VisibilityAction):
                if action.visibility is None:
                    await self.telegram.answer_callback(query.id, ACTION_EXPIRED)
                    return
                await self.pagination.set_visibility(
                    chat_id, memo_name, action.visibility, message_id
                )
                await self.telegram.answer_callback(
                    query.id, VISIBILITY_CHANGED.format(visibility=action.visibility.value)
                )
            elif isinstance(action, PinAction):
                memo = await self.pagination.toggle_pinned(chat_id, memo_name, message_id)
                await self.telegram.answer_callback(
                    query.id, PINNED_ANSWER if memo.pinned else UNPINNED_ANSWER
                )
        except Exception as e:
            logger.error(f"Callback {type(action).__name__} failed: {e}")
            error = str(e) or UNKNOWN_ERROR
            await self.telegram.answer_callback(query.id, ACTION_FAILED.format(error=error))
