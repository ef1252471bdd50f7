"""Memo browsing through inline keyboards.

Lists memos page by page and renders memo details with visibility and pin
controls. Navigation state lives entirely in callback payloads: going
forward pushes the current page token onto a history stack, going back pops
it, so earlier pages are replayed exactly while the next page is always a
live fetch. Nothing is cached between updates.
"""

import logging
from collections.abc import Sequence

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ..config import LimitsConfig
from ..models import Memo, MemoAttachment, Visibility
from ..services.memos import DEFAULT_ORDER_BY, MemosClient
from ..services.telegram import TelegramClient
from .callback_codec import (
    BaseAction,
    DetailAction,
    ListAction,
    PinAction,
    VisibilityAction,
    encode_callback,
)
from .messages import (
    BACK_BUTTON,
    CURRENT_MARK,
    DISPLAY_TIME_LINE,
    EMPTY_PLACEHOLDER,
    IMAGE_LINK_MESSAGE,
    LIST_PROMPT_MESSAGE,
    META_SEPARATOR,
    NEXT_BUTTON,
    NO_MEMOS_MESSAGE,
    NOT_PINNED_LABEL,
    PIN_BUTTON,
    PINNED_LABEL,
    PREV_BUTTON,
    TAGS_LINE,
    UNPIN_BUTTON,
    UPDATE_TIME_LINE,
    VISIBILITY_LINE,
)
from .utils import excerpt, truncate_text

logger = logging.getLogger(__name__)


def memo_label(memo: Memo, limit: int) -> str:
    """Short button label: snippet, else first content line, else a placeholder."""
    title = (memo.snippet or "").strip() or memo.title
    return excerpt(title, limit)


def render_list_text(memos: Sequence[Memo]) -> str:
    """List header: a prompt, or the empty notice when there is nothing to pick."""
    return LIST_PROMPT_MESSAGE if memos else NO_MEMOS_MESSAGE


def render_detail_text(memo: Memo, limit: int) -> str:
    """Render the detail view: title, metadata line and full body."""
    meta = [
        PINNED_LABEL if memo.pinned else NOT_PINNED_LABEL,
        VISIBILITY_LINE.format(visibility=memo.visibility or "UNKNOWN"),
    ]
    if memo.tags:
        meta.append(TAGS_LINE.format(tags=", ".join(memo.tags)))
    if memo.display_time:
        meta.append(DISPLAY_TIME_LINE.format(time=memo.display_time))
    if memo.update_time:
        meta.append(UPDATE_TIME_LINE.format(time=memo.update_time))

    body = memo.content or EMPTY_PLACEHOLDER
    return truncate_text(f"{memo.title}\n{META_SEPARATOR.join(meta)}\n\n{body}", limit)


def memo_images(memo: Memo, limit: int) -> list[MemoAttachment]:
    """Image attachments that Telegram can fetch by URL."""
    images = [
        attachment
        for attachment in memo.attachments
        if attachment.external_link and attachment.type.startswith("image/")
    ]
    return images[:limit]


class PaginationController:
    """Renders memo lists and details and applies detail actions."""

    def __init__(
        self,
        memos: MemosClient,
        telegram: TelegramClient,
        limits: LimitsConfig,
        page_size: int = 8,
        show_media: bool = False,
    ):
        """Initialize pagination controller.

        Args:
            memos: Memos API client.
            telegram: Telegram API client.
            limits: Text, media and callback ceilings.
            page_size: Memos per page.
            show_media: Whether opening a memo also sends its images.
        """
        self.memos = memos
        self.telegram = telegram
        self.limits = limits
        self.page_size = page_size
        self.show_media = show_media

    def _button(self, text: str, payload: BaseAction) -> InlineKeyboardButton:
        return InlineKeyboardButton(
            text=text,
            callback_data=encode_callback(payload, self.limits.callback_data_len),
        )

    def build_list_keyboard(
        self,
        memos: Sequence[Memo],
        token: str,
        next_token: str,
        history: Sequence[str],
    ) -> InlineKeyboardMarkup | None:
        """Build one row per memo plus the Prev/Next navigation row.

        Args:
            memos: Memos on the current page.
            token: Token the current page was fetched with.
            next_token: Continuation token returned with the page.
            history: Tokens of the pages before the current one.

        Returns:
            Keyboard markup, or None if there is nothing to press.
        """
        rows = [
            [
                self._button(
                    memo_label(memo, self.limits.excerpt_len),
                    DetailAction(memo_id=memo.memo_id),
                )
            ]
            for memo in memos
        ]

        nav_row: list[InlineKeyboardButton] = []
        if history:
            nav_row.append(
                self._button(PREV_BUTTON, ListAction(token=history[-1], history=tuple(history[:-1])))
            )
        if next_token:
            nav_row.append(
                self._button(NEXT_BUTTON, ListAction(token=next_token, history=(*history, token)))
            )
        if nav_row:
            rows.append(nav_row)

        return InlineKeyboardMarkup(rows) if rows else None

    def build_detail_keyboard(self, memo: Memo) -> InlineKeyboardMarkup:
        """Build visibility, pin and back controls for a memo."""
        visibility_row = [
            self._button(
                CURRENT_MARK.format(label=level.value) if memo.visibility == level.value else level.value,
                VisibilityAction(memo_id=memo.memo_id, visibility=level),
            )
            for level in Visibility
        ]
        control_row = [
            self._button(UNPIN_BUTTON if memo.pinned else PIN_BUTTON, PinAction(memo_id=memo.memo_id)),
            self._button(BACK_BUTTON, ListAction()),
        ]
        return InlineKeyboardMarkup([visibility_row, control_row])

    async def show_list(
        self,
        chat_id: int,
        token: str = "",
        history: Sequence[str] = (),
        message_id: int | None = None,
    ) -> None:
        """Fetch a page of memos and show it.

        Args:
            chat_id: Chat to render into.
            token: Page token, empty for the newest memos.
            history: Tokens of earlier pages.
            message_id: Message to edit in place, or None to send a new one.

        Raises:
            MemosAPIError: If the page could not be fetched.
        """
        page = await self.memos.list_memos(self.page_size, token, DEFAULT_ORDER_BY)
        text = render_list_text(page.memos)
        keyboard = self.build_list_keyboard(
            page.memos, token, page.next_page_token or "", history
        )
        logger.debug(f"Showing {len(page.memos)} memos, depth {len(history)}")

        if message_id:
            await self.telegram.edit_message_text(chat_id, message_id, text, keyboard)
        else:
            await self.telegram.send_message(chat_id, text, keyboard)

    async def render_detail(self, chat_id: int, memo: Memo, message_id: int | None = None) -> None:
        """Show the detail text and controls, editing message_id when given."""
        text = render_detail_text(memo, self.limits.max_message_len)
        keyboard = self.build_detail_keyboard(memo)
        if message_id:
            await self.telegram.edit_message_text(chat_id, message_id, text, keyboard)
        else:
            await self.telegram.send_message(chat_id, text, keyboard)

    async def show_detail(
        self, chat_id: int, memo_name: str, message_id: int | None = None
    ) -> Memo:
        """Fetch a memo and render its detail view.

        The text view with its controls is always rendered. With show_media
        enabled the memo's images follow as separate messages rather than
        replacing the text, so the visibility and pin buttons stay reachable.
        """
        memo = await self.memos.get_memo(memo_name)
        await self.render_detail(chat_id, memo, message_id)
        if self.show_media:
            await self.send_memo_media(chat_id, memo)
        return memo

    async def set_visibility(
        self, chat_id: int, memo_name: str, visibility: Visibility, message_id: int | None = None
    ) -> Memo:
        """Change a memo's visibility and re-render its detail view."""
        memo = await self.memos.set_visibility(memo_name, visibility)
        await self.render_detail(chat_id, memo, message_id)
        return memo

    async def toggle_pinned(
        self, chat_id: int, memo_name: str, message_id: int | None = None
    ) -> Memo:
        """Flip a memo's pinned flag and re-render its detail view."""
        current = await self.memos.get_memo(memo_name)
        memo = await self.memos.set_pinned(memo_name, not current.pinned)
        await self.render_detail(chat_id, memo, message_id)
        return memo

    async def send_memo_media(self, chat_id: int, memo: Memo) -> None:
        """Send a memo's images as an album, falling back to single photos and links."""
        images = memo_images(memo, self.limits.max_detail_media)
        if not images:
            return

        caption = memo.content or EMPTY_PLACEHOLDER
        links = [image.external_link for image in images if image.external_link]
        result = await self.telegram.send_media_group(chat_id, links, caption)
        if result.ok:
            return

        for index, link in enumerate(links):
            sent = await self.telegram.send_photo(chat_id, link, caption if index == 0 else None)
            if not sent.ok:
                await self.telegram.send_message(chat_id, IMAGE_LINK_MESSAGE.format(link=link))
