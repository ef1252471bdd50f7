"""Data models for the memogram bot.

Defines Pydantic models for the normalized Telegram message view, the Memos
entities read and written by the bot, and the album bookkeeping record. Wire
models accept both the camelCase names used by the Memos API and snake_case
attribute names.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MEMO_NAME_PREFIX = "memos/"


class Visibility(str, Enum):
    """Memo visibility levels understood by Memos."""

    PUBLIC = "PUBLIC"
    PROTECTED = "PROTECTED"
    PRIVATE = "PRIVATE"


class EntityKind(str, Enum):
    """Rich-text entity kinds the formatter knows how to render."""

    URL = "url"
    TEXT_LINK = "text_link"
    BOLD = "bold"
    ITALIC = "italic"
    OTHER = "other"


class EntitySpan(BaseModel):
    """Marked sub-range of message text.

    Offsets and lengths count Python code points, not the UTF-16 units
    Telegram reports on the wire.

    Attributes:
        kind: Entity kind, unsupported kinds are collapsed to OTHER.
        offset: Start index in the annotated text.
        length: Number of characters covered.
        url: Link target for text_link entities.
    """

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    offset: int = Field(ge=0)
    length: int = Field(ge=0)
    url: str | None = None


class ForwardOrigin(BaseModel):
    """Summary of where a forwarded message came from.

    Attributes:
        kind: One of user, hidden_user, chat, channel or unknown.
        name: Display name or chat title, if the platform provided one.
        handle: Public username without the leading @.
        present: False when the origin carried no user/chat object.
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    name: str | None = None
    handle: str | None = None
    present: bool = True


class MediaRef(BaseModel):
    """Downloadable file attached to an incoming message.

    Attributes:
        file_id: Telegram file identifier used with getFile.
        label: Human-readable name used in warnings.
        size: Declared size in bytes, if Telegram reported one.
        filename: File name to store the attachment under.
        mime_type: MIME type declared by the source message.
    """

    model_config = ConfigDict(frozen=True)

    file_id: str
    label: str
    size: int | None = None
    filename: str | None = None
    mime_type: str | None = None


class IncomingMessage(BaseModel):
    """Normalized view of a Telegram chat message.

    Attributes:
        chat_id: Chat the message was sent to.
        message_id: Telegram message identifier.
        text: Message text, for plain messages.
        caption: Media caption, for media messages.
        entities: Spans annotating text.
        caption_entities: Spans annotating caption.
        forward_origin: Origin descriptor for forwarded messages.
        album_id: Telegram media_group_id shared by album messages.
        media: Files to attach, already in priority order.
    """

    model_config = ConfigDict(frozen=True)

    chat_id: int
    message_id: int = 0
    text: str | None = None
    caption: str | None = None
    entities: tuple[EntitySpan, ...] = ()
    caption_entities: tuple[EntitySpan, ...] = ()
    forward_origin: ForwardOrigin | None = None
    album_id: str | None = None
    media: tuple[MediaRef, ...] = ()


class AlbumState(BaseModel):
    """Stored pointer from a photo album to the memo collecting it.

    Attributes:
        memo_name: Resource name of the album memo.
        notified: Whether the chat has already been told the memo was saved.
    """

    model_config = ConfigDict(populate_by_name=True)

    memo_name: str = Field(alias="memoName")
    notified: bool = False


class MemoAttachment(BaseModel):
    """Attachment metadata returned by Memos."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    filename: str = ""
    type: str = ""
    size: str | int | None = None
    external_link: str | None = Field(default=None, alias="externalLink")


class Memo(BaseModel):
    """Memo resource as returned by the Memos API.

    Attributes:
        name: Resource name in the form memos/<id>.
        content: Markdown body.
        visibility: Visibility level, kept as text to tolerate unknown values.
        pinned: Whether the memo is pinned.
        tags: Tags extracted by Memos.
        attachments: Attached resources.
        snippet: Plain-text preview computed by Memos.
        display_time: Timestamp memos are ordered by.
        update_time: Last modification timestamp.
        create_time: Creation timestamp.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    content: str = ""
    visibility: str | None = None
    pinned: bool = False
    tags: list[str] = Field(default_factory=list)
    attachments: list[MemoAttachment] = Field(default_factory=list)
    snippet: str | None = None
    display_time: str | None = Field(default=None, alias="displayTime")
    update_time: str | None = Field(default=None, alias="updateTime")
    create_time: str | None = Field(default=None, alias="createTime")

    @property
    def memo_id(self) -> str:
        """Bare identifier without the memos/ prefix."""
        return memo_id_from_name(self.name)

    @property
    def title(self) -> str:
        """First non-empty line of the body, or a placeholder."""
        first_line = self.content.split("\n")[0].strip() if self.content else ""
        return first_line or "(empty)"


class MemoPage(BaseModel):
    """One page of a memo listing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    memos: list[Memo] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class DownloadedFile(BaseModel):
    """Media payload fetched from Telegram and ready for upload.

    Attributes:
        filename: Name to store the attachment under.
        content_type: Resolved MIME type.
        content: Raw bytes.
    """

    filename: str
    content_type: str
    content: bytes


def memo_id_from_name(name: str) -> str:
    """Strip the memos/ prefix from a resource name."""
    if not name:
        return ""
    if name.startswith(MEMO_NAME_PREFIX):
        return name[len(MEMO_NAME_PREFIX):]
    return name


def memo_name_from_id(memo_id: str) -> str:
    """Build a memos/<id> resource name from a bare id."""
    if not memo_id:
        return ""
    if memo_id.startswith(MEMO_NAME_PREFIX):
        return memo_id
    return f"{MEMO_NAME_PREFIX}{memo_id}"
