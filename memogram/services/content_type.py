"""MIME type resolution for downloaded media.

Telegram's file server usually answers with a generic content type, while
Memos needs a real one to render images inline. The resolver prefers explicit
information and falls back to sniffing well-known image signatures.
"""

GENERIC_CONTENT_TYPE = "application/octet-stream"

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def sniff_image_type(data: bytes) -> str | None:
    """Detect common image formats from their magic numbers.

    Args:
        data: Leading bytes of the file, or the whole file.

    Returns:
        MIME type for JPEG, PNG, GIF or WebP data, None otherwise.
    """
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:8] == PNG_SIGNATURE:
        return "image/png"
    if len(data) >= 6 and data[:4] == b"GIF8":
        return "image/gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def normalize_content_type(value: str | None) -> str:
    """Lowercase a Content-Type header and drop its parameters."""
    return (value or "").split(";")[0].strip().lower()


def resolve_content_type(declared: str | None, hinted: str | None, data: bytes) -> str:
    """Pick the most specific MIME type available for a download.

    Args:
        declared: Content-Type header returned by the file server.
        hinted: MIME type declared by the Telegram message.
        data: Downloaded bytes.

    Returns:
        Declared type, hinted type, sniffed type or the generic binary type,
        whichever comes first and is not generic.
    """
    normalized = normalize_content_type(declared)
    if normalized and normalized != GENERIC_CONTENT_TYPE:
        return normalized
    if hinted and hinted != GENERIC_CONTENT_TYPE:
        return hinted
    return sniff_image_type(data) or GENERIC_CONTENT_TYPE
