"""Bot utility functions for outgoing text.

Provides truncation helpers that keep chat messages, media captions and
button labels within Telegram's size limits.
"""

from .messages import TRUNCATION_MARKER


def truncate_text(text: str, limit: int) -> str:
    """Cut text to at most limit characters, marking the cut.

    Args:
        text: Text to send.
        limit: Maximum number of characters allowed.

    Returns:
        The original text if it fits, otherwise a prefix ending with "...".
    """
    if len(text) <= limit:
        return text
    return f"{text[: max(0, limit - len(TRUNCATION_MARKER))]}{TRUNCATION_MARKER}"


def excerpt(text: str, limit: int) -> str:
    """Return the first limit characters of text, without a marker."""
    if len(text) <= limit:
        return text
    return text[:limit]
