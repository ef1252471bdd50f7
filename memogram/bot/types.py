"""Typed structures shared across bot components."""

from __future__ import annotations

from typing import TypedDict

from ..models import AlbumState, Memo


class MemoTarget(TypedDict):
    """Memo an incoming message should be stored into.

    Attributes:
        memo: Memo created or reused for the message.
        should_notify: Whether this message owes the chat a "saved" notice.
        album_id: Album the message belongs to, None for single messages.
        state: Album state as persisted, None for single messages.
    """

    memo: Memo
    should_notify: bool
    album_id: str | None
    state: AlbumState | None


class CallResult(TypedDict, total=False):
    """JSON-friendly outcome of a Bot API call reported by the setup endpoint."""

    ok: bool
    error: str | None


class SetupResult(TypedDict):
    """Response body of the webhook setup endpoint."""

    webhookUrl: str
    setWebhook: CallResult
    setCommands: CallResult
