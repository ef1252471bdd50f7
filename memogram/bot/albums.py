"""Photo album deduplication.

Telegram delivers an album as one message per item, sharing a
media_group_id but with no ordering guarantee. The deduplicator keeps a
pointer from the album id to the memo collecting it, so that every item is
attached to the same memo and the chat is told "saved" exactly once.

State per album id (stored with a TTL):
- absent: create a memo, store {memoName, notified: false}, notify
- notified=false: reuse the memo, notify
- notified=true: reuse the memo, stay silent

The read-then-write against the store is not atomic. Two items of the same
album processed concurrently can both see "absent" and create two memos;
this is accepted.
"""

import asyncio
import json
import logging

import aiohttp

from ..models import AlbumState, IncomingMessage
from ..services.album_store import AlbumStore
from ..services.memos import MemosAPIError, MemosClient
from .types import MemoTarget

logger = logging.getLogger(__name__)


class AlbumDeduplicator:
    """Resolves the target memo for incoming messages."""

    def __init__(self, store: AlbumStore, memos: MemosClient, ttl: int = 3600):
        """Initialize the deduplicator.

        Args:
            store: Album state storage.
            memos: Memos API client.
            ttl: Seconds an album entry is kept after each write.
        """
        self.store = store
        self.memos = memos
        self.ttl = ttl

    async def load_state(self, album_id: str) -> AlbumState | None:
        """Read album state, accepting the legacy bare memo name format."""
        raw = await self.store.get(album_id)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return AlbumState(memo_name=raw)
        if isinstance(data, dict) and data.get("memoName"):
            return AlbumState.model_validate(data)
        return None

    async def save_state(self, album_id: str, state: AlbumState) -> None:
        await self.store.put(album_id, state.model_dump_json(by_alias=True), self.ttl)

    async def resolve(self, message: IncomingMessage, content: str) -> MemoTarget:
        """Create or reuse the memo for a message.

        Args:
            message: Incoming message, album id included.
            content: Canonical memo content built from the message.

        Returns:
            Target memo plus whether the chat should be notified.

        Raises:
            MemosAPIError: If a new memo could not be created.
        """
        album_id = message.album_id
        if not album_id:
            memo = await self.memos.create_memo(content)
            return MemoTarget(memo=memo, should_notify=True, album_id=None, state=None)

        state = await self.load_state(album_id)
        if state is not None:
            try:
                memo = await self.memos.get_memo(state.memo_name)
                logger.debug(f"Album {album_id} continues {memo.name}")
                return MemoTarget(
                    memo=memo,
                    should_notify=not state.notified,
                    album_id=album_id,
                    state=state,
                )
            except (MemosAPIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning(
                    f"Album {album_id} points to unavailable {state.memo_name}, starting over: {e}"
                )

        memo = await self.memos.create_memo(content)
        state = AlbumState(memo_name=memo.name)
        await self.save_state(album_id, state)
        logger.info(f"Album {album_id} collects into {memo.name}")
        return MemoTarget(memo=memo, should_notify=True, album_id=album_id, state=state)

    async def mark_notified(self, target: MemoTarget) -> None:
        """Record that the chat has been told about the album memo."""
        album_id = target["album_id"]
        state = target["state"]
        if not album_id or state is None or state.notified:
            return
        await self.save_state(album_id, AlbumState(memo_name=state.memo_name, notified=True))
