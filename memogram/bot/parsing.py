"""Normalization of python-telegram-bot messages.

Converts ``telegram.Message`` objects into immutable ``IncomingMessage``
models: entity offsets are translated from UTF-16 code units to Python code
points, forward origins are summarized, and attached media is collected in
priority order.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from telegram import Message, MessageEntity, PhotoSize

from ..models import EntityKind, EntitySpan, ForwardOrigin, IncomingMessage, MediaRef

SUPPORTED_KINDS = {kind.value: kind for kind in EntityKind if kind is not EntityKind.OTHER}

VOICE_FILENAME = "voice.ogg"
VOICE_MIME_TYPE = "audio/ogg"
VIDEO_FILENAME = "video.mp4"
VIDEO_MIME_TYPE = "video/mp4"
PHOTO_FILENAME = "photo.jpg"
PHOTO_MIME_TYPE = "image/jpeg"


def _utf16_prefix_length(encoded: bytes, units: int) -> int:
    """Count code points in the first units UTF-16 code units."""
    return len(encoded[: units * 2].decode("utf-16-le", errors="ignore"))


def convert_entities(text: str | None, entities: Sequence[MessageEntity]) -> tuple[EntitySpan, ...]:
    """Translate Telegram entities into code-point based spans.

    Args:
        text: Text the entities annotate.
        entities: Entities as delivered by Telegram, offsets in UTF-16 units.

    Returns:
        Spans whose offsets index directly into the Python string.
    """
    if not text or not entities:
        return ()

    encoded = text.encode("utf-16-le")
    spans: list[EntitySpan] = []
    for entity in entities:
        start = _utf16_prefix_length(encoded, entity.offset)
        end = _utf16_prefix_length(encoded, entity.offset + entity.length)
        spans.append(
            EntitySpan(
                kind=SUPPORTED_KINDS.get(_enum_value(entity.type), EntityKind.OTHER),
                offset=start,
                length=end - start,
                url=entity.url,
            )
        )
    return tuple(spans)


def _enum_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def convert_forward_origin(origin: Any) -> ForwardOrigin | None:
    """Summarize a MessageOrigin object, or return None if there is none."""
    if origin is None:
        return None

    kind = _enum_value(origin.type)
    if kind == "user":
        user = getattr(origin, "sender_user", None)
        if user is None:
            return ForwardOrigin(kind=kind, present=False)
        name = f"{user.first_name} {user.last_name}" if user.last_name else user.first_name
        return ForwardOrigin(kind=kind, name=name, handle=user.username)
    if kind == "hidden_user":
        return ForwardOrigin(kind=kind, name=getattr(origin, "sender_user_name", None))
    if kind in ("chat", "channel"):
        chat = getattr(origin, "sender_chat" if kind == "chat" else "chat", None)
        if chat is None:
            return ForwardOrigin(kind=kind, present=False)
        return ForwardOrigin(kind=kind, name=chat.title, handle=chat.username)
    return ForwardOrigin(kind="unknown")


def pick_photo_size(sizes: Sequence[PhotoSize], max_bytes: int) -> PhotoSize | None:
    """Choose the largest photo rendition that fits under max_bytes.

    Renditions without a declared size are assumed to fit. If every
    rendition is too large the smallest one is returned.
    """
    ordered = sorted(sizes, key=lambda size: size.file_size or 0, reverse=True)
    for size in ordered:
        if not size.file_size or size.file_size <= max_bytes:
            return size
    return ordered[-1] if ordered else None


def collect_media(message: Message, max_bytes: int) -> tuple[MediaRef, ...]:
    """Collect attachments in priority order: document, voice, video, photo."""
    media: list[MediaRef] = []

    if message.document:
        document = message.document
        media.append(
            MediaRef(
                file_id=document.file_id,
                label=document.file_name or "document",
                size=document.file_size,
                filename=document.file_name,
                mime_type=document.mime_type,
            )
        )
    if message.voice:
        voice = message.voice
        media.append(
            MediaRef(
                file_id=voice.file_id,
                label="voice",
                size=voice.file_size,
                filename=VOICE_FILENAME,
                mime_type=voice.mime_type or VOICE_MIME_TYPE,
            )
        )
    if message.video:
        video = message.video
        media.append(
            MediaRef(
                file_id=video.file_id,
                label="video",
                size=video.file_size,
                filename=video.file_name or VIDEO_FILENAME,
                mime_type=video.mime_type or VIDEO_MIME_TYPE,
            )
        )
    if message.photo:
        candidate = pick_photo_size(message.photo, max_bytes)
        if candidate:
            media.append(
                MediaRef(
                    file_id=candidate.file_id,
                    label="photo",
                    size=candidate.file_size,
                    filename=PHOTO_FILENAME,
                    mime_type=PHOTO_MIME_TYPE,
                )
            )

    return tuple(media)


def parse_message(message: Message, max_media_bytes: int) -> IncomingMessage:
    """Build the normalized view of a Telegram message.

    Args:
        message: Message delivered in a Telegram update.
        max_media_bytes: Media ceiling used to choose a photo rendition.

    Returns:
        Immutable IncomingMessage ready for the pipeline.
    """
    return IncomingMessage(
        chat_id=message.chat.id,
        message_id=message.message_id,
        text=message.text,
        caption=message.caption,
        entities=convert_entities(message.text, message.entities),
        caption_entities=convert_entities(message.caption, message.caption_entities),
        forward_origin=convert_forward_origin(getattr(message, "forward_origin", None)),
        album_id=message.media_group_id,
        media=collect_media(message, max_media_bytes),
    )
