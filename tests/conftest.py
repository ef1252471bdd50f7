"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: environment setup, in-memory
fakes for the Memos and Telegram clients, and sample Telegram payloads.
"""

import os
from typing import Any

import pytest
from telegram import Bot, Update

from memogram.bot.albums import AlbumDeduplicator
from memogram.bot.pagination import PaginationController
from memogram.bot.pipeline import MessagePipeline
from memogram.config import LimitsConfig, MemosConfig
from memogram.models import (
    DownloadedFile,
    Memo,
    MemoAttachment,
    MemoPage,
    Visibility,
    memo_id_from_name,
    memo_name_from_id,
)
from memogram.services.album_store import InMemoryAlbumStore
from memogram.services.memos import MemosAPIError
from memogram.services.telegram import MediaTooLargeError, TelegramResult

# Test constants
TEST_BOT_TOKEN = "123456:TEST-token"
TEST_MEMOS_URL = "https://memos.example.com"
TEST_CHAT_ID = 4242

os.environ.setdefault("BOT_TOKEN", TEST_BOT_TOKEN)
os.environ.setdefault("MEMOS_TOKEN", "memos-test-token")
os.environ.setdefault("MEMOS_BASE_URL", TEST_MEMOS_URL)


class FakeMemosClient:
    """In-memory stand-in for MemosClient that records every call."""

    def __init__(self, base_url: str = TEST_MEMOS_URL):
        self.base_url = base_url
        self.memos: dict[str, Memo] = {}
        self.attachments: list[tuple[str, DownloadedFile]] = []
        self.created: list[str] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.list_calls: list[tuple[int, str, str]] = []
        self.pages: dict[str, MemoPage] = {}
        self.fail_create: Exception | None = None
        self._counter = 0

    def add(self, memo: Memo) -> Memo:
        self.memos[memo.name] = memo
        return memo

    async def create_memo(self, content: str) -> Memo:
        if self.fail_create:
            raise self.fail_create
        self._counter += 1
        memo = Memo(name=f"memos/m{self._counter}", content=content, visibility="PRIVATE")
        self.memos[memo.name] = memo
        self.created.append(content)
        return memo

    async def get_memo(self, name: str) -> Memo:
        memo = self.memos.get(memo_name_from_id(name))
        if memo is None:
            raise MemosAPIError(404, "memo not found")
        return memo

    async def update_memo(self, name: str, fields: dict[str, Any]) -> Memo:
        memo = await self.get_memo(name)
        self.updates.append((memo.name, fields))
        updated = memo.model_copy(update=fields)
        self.memos[memo.name] = updated
        return updated

    async def set_visibility(self, name: str, visibility: Visibility) -> Memo:
        return await self.update_memo(name, {"visibility": visibility.value})

    async def set_pinned(self, name: str, pinned: bool) -> Memo:
        return await self.update_memo(name, {"pinned": pinned})

    async def create_attachment(self, memo_name: str, file: DownloadedFile) -> MemoAttachment:
        self.attachments.append((memo_name, file))
        return MemoAttachment(
            name=f"attachments/a{len(self.attachments)}",
            filename=file.filename,
            type=file.content_type,
        )

    async def list_memos(self, page_size: int, page_token: str = "", order_by: str = "") -> MemoPage:
        self.list_calls.append((page_size, page_token, order_by))
        return self.pages.get(page_token, MemoPage())

    def memo_link(self, name: str) -> str:
        return f"{self.base_url}/memos/{memo_id_from_name(name)}"


class FakeTelegramClient:
    """In-memory stand-in for TelegramClient that records outgoing calls."""

    def __init__(self):
        self.sent: list[tuple[int, str, Any]] = []
        self.edited: list[tuple[int, int, str, Any]] = []
        self.answers: list[tuple[str, str]] = []
        self.media_groups: list[tuple[int, list[str], str | None]] = []
        self.photos: list[tuple[int, str, str | None]] = []
        self.files: dict[str, tuple[bytes, str | None]] = {}
        self.oversized: set[str] = set()
        self.media_group_ok = True

    @property
    def texts(self) -> list[str]:
        return [text for _, text, _ in self.sent]

    async def send_message(self, chat_id: int, text: str, reply_markup: Any = None) -> TelegramResult:
        self.sent.append((chat_id, text, reply_markup))
        return TelegramResult(ok=True)

    async def edit_message_text(
        self, chat_id: int, message_id: int, text: str, reply_markup: Any = None
    ) -> TelegramResult:
        self.edited.append((chat_id, message_id, text, reply_markup))
        return TelegramResult(ok=True)

    async def send_media_group(
        self, chat_id: int, photo_urls: list[str], caption: str | None = None
    ) -> TelegramResult:
        self.media_groups.append((chat_id, list(photo_urls), caption))
        if self.media_group_ok:
            return TelegramResult(ok=True)
        return TelegramResult(ok=False, error="Bad Request: failed to send media group")

    async def send_photo(self, chat_id: int, photo_url: str, caption: str | None = None) -> TelegramResult:
        self.photos.append((chat_id, photo_url, caption))
        return TelegramResult(ok=True)

    async def answer_callback(self, callback_id: str, text: str = "") -> TelegramResult:
        self.answers.append((callback_id, text))
        return TelegramResult(ok=True)

    async def set_webhook(self, url: str) -> TelegramResult:
        return TelegramResult(ok=True)

    async def set_commands(self, commands: Any) -> TelegramResult:
        return TelegramResult(ok=True)

    async def get_file_path(self, file_id: str) -> str | None:
        if file_id in self.files or file_id in self.oversized:
            return f"files/{file_id}"
        return None

    async def download_file(self, file_path: str) -> tuple[bytes, str | None] | None:
        file_id = file_path.removeprefix("files/")
        if file_id in self.oversized:
            raise MediaTooLargeError(21 * 1024 * 1024, 20 * 1024 * 1024)
        return self.files.get(file_id)


@pytest.fixture
def limits() -> LimitsConfig:
    return LimitsConfig()


@pytest.fixture
def memos_config() -> MemosConfig:
    return MemosConfig(MEMOS_TOKEN="memos-test-token", MEMOS_BASE_URL=f"{TEST_MEMOS_URL}/")


@pytest.fixture
def album_store() -> InMemoryAlbumStore:
    return InMemoryAlbumStore()


@pytest.fixture
def fake_memos() -> FakeMemosClient:
    return FakeMemosClient()


@pytest.fixture
def fake_telegram() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def deduplicator(album_store, fake_memos) -> AlbumDeduplicator:
    return AlbumDeduplicator(album_store, fake_memos, ttl=3600)


@pytest.fixture
def pagination(fake_memos, fake_telegram, limits) -> PaginationController:
    return PaginationController(fake_memos, fake_telegram, limits, page_size=2)


@pytest.fixture
def pipeline(fake_telegram, fake_memos, deduplicator, pagination, limits) -> MessagePipeline:
    return MessagePipeline(fake_telegram, fake_memos, deduplicator, pagination, limits)


@pytest.fixture
def bot() -> Bot:
    """Unconnected Bot used only to deserialize updates."""
    return Bot(TEST_BOT_TOKEN)


@pytest.fixture
def chat_id() -> int:
    return TEST_CHAT_ID


def _message_payload(**fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "message_id": 10,
        "date": 1700000000,
        "chat": {"id": TEST_CHAT_ID, "type": "private"},
        "from": {"id": 1, "is_bot": False, "first_name": "Tester"},
    }
    payload.update(fields)
    return payload


@pytest.fixture
def make_update(bot):
    """Factory parsing a message update the way the webhook route does."""

    def factory(update_id: int = 1, **fields: Any) -> Update:
        update = Update.de_json({"update_id": update_id, "message": _message_payload(**fields)}, bot)
        assert update is not None
        return update

    return factory


@pytest.fixture
def make_callback_update(bot):
    """Factory parsing a callback query pressed on a bot message."""

    def factory(data: str | None, with_message: bool = True) -> Update:
        callback: dict[str, Any] = {
            "id": "cb-1",
            "from": {"id": 1, "is_bot": False, "first_name": "Tester"},
            "chat_instance": "ci-1",
        }
        if data is not None:
            callback["data"] = data
        if with_message:
            callback["message"] = _message_payload(message_id=77, text="Select a memo:")
        else:
            callback["inline_message_id"] = "inline-1"
        update = Update.de_json({"update_id": 2, "callback_query": callback}, bot)
        assert update is not None
        return update

    return factory
