"""Markdown rendering of Telegram message content.

Turns message text plus its rich-text entities into the Markdown flavour
Memos understands, and prefixes forwarded messages with a line naming their
origin.
"""

import logging

from ..models import EntityKind, EntitySpan, ForwardOrigin, IncomingMessage

logger = logging.getLogger(__name__)

FORWARD_FALLBACK_NAMES = {
    "user": "user",
    "chat": "chat",
    "channel": "channel",
}
HIDDEN_USER_NAME = "Hidden User"


def split_whitespace(segment: str) -> tuple[str, str, str]:
    """Split a segment into leading whitespace, core and trailing whitespace.

    Args:
        segment: Text covered by one entity.

    Returns:
        Tuple (leading, core, trailing) that concatenates back to segment.
    """
    stripped_left = segment.lstrip()
    leading = segment[: len(segment) - len(stripped_left)]
    core = stripped_left.rstrip()
    trailing = stripped_left[len(core):]
    return leading, core, trailing


def apply_entity(segment: str, span: EntitySpan) -> str:
    """Wrap the non-whitespace core of segment in the span's Markdown markers."""
    if not segment.strip():
        return segment

    leading, core, trailing = split_whitespace(segment)
    if span.kind is EntityKind.URL:
        wrapped = f"[{core}]({core})"
    elif span.kind is EntityKind.TEXT_LINK:
        wrapped = f"[{core}]({span.url or core})"
    elif span.kind is EntityKind.BOLD:
        wrapped = f"**{core}**"
    elif span.kind is EntityKind.ITALIC:
        wrapped = f"*{core}*"
    else:
        return segment
    return f"{leading}{wrapped}{trailing}"


def format_entities(text: str, spans: tuple[EntitySpan, ...] | list[EntitySpan]) -> str:
    """Render text with its supported entities as Markdown.

    Spans are applied in (offset, length) order. A span starting inside an
    already rendered span is dropped, so entities never nest.

    Args:
        text: Raw message text or caption.
        spans: Entity spans in code-point offsets, unsupported kinds included.

    Returns:
        Text with Markdown markup inserted around each accepted span.
    """
    ordered = sorted(
        (span for span in spans if span.kind is not EntityKind.OTHER),
        key=lambda span: (span.offset, span.length),
    )

    parts: list[str] = []
    cursor = 0
    for span in ordered:
        start = span.offset
        end = span.offset + span.length
        if start < cursor:
            logger.debug("Dropping overlapping %s entity at %d", span.kind.value, start)
            continue
        if start >= len(text):
            break
        parts.append(text[cursor:start])
        parts.append(apply_entity(text[start:end], span))
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)


def forward_origin_prefix(origin: ForwardOrigin) -> str | None:
    """Describe a forward origin as a single line.

    Returns:
        "Forwarded from ..." line, or None for unknown origin kinds.
    """
    if origin.kind == "hidden_user":
        return f"Forwarded from {origin.name or HIDDEN_USER_NAME}"

    if origin.kind not in FORWARD_FALLBACK_NAMES:
        return None

    if not origin.present:
        return f"Forwarded from {FORWARD_FALLBACK_NAMES[origin.kind]}"

    name = origin.name or FORWARD_FALLBACK_NAMES[origin.kind]
    if origin.handle:
        return f"Forwarded from {name} (@{origin.handle})"
    return f"Forwarded from {name}"


def build_message_content(message: IncomingMessage) -> str:
    """Build the canonical memo body for an incoming message.

    Captions take priority over text. Entities are rendered, the forward
    origin line is prepended and surrounding whitespace is trimmed.
    """
    content = message.text or ""
    spans = message.entities
    if message.caption:
        content = message.caption
        spans = message.caption_entities

    if spans:
        content = format_entities(content, spans)

    if message.forward_origin:
        prefix = forward_origin_prefix(message.forward_origin)
        if prefix:
            content = f"{prefix}\n{content}"

    return content.strip()
