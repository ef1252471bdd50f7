"""Dependency-injection container.

Wires configuration, service clients and bot components together. The
Telegram ``Bot`` is only known once the python-telegram-bot Application has
been built, so it is declared as a dependency and overridden at startup.
"""

from dependency_injector import containers, providers
from telegram import Bot

from memogram.bot.albums import AlbumDeduplicator
from memogram.bot.pagination import PaginationController
from memogram.bot.pipeline import MessagePipeline
from memogram.config import get_config
from memogram.services.album_store import create_album_store
from memogram.services.memos import MemosClient
from memogram.services.telegram import TelegramClient


class Container(containers.DeclarativeContainer):
    """DI container for the application."""

    config = providers.Singleton(get_config)
    bot = providers.Dependency(instance_of=Bot)

    # Services
    album_store = providers.Singleton(create_album_store, config=config.provided.album_store)
    memos_client = providers.Singleton(
        MemosClient, config=config.provided.memos, timeout=config.provided.bot.timeout
    )
    telegram_client = providers.Singleton(
        TelegramClient,
        bot=bot,
        limits=config.provided.limits,
        timeout=config.provided.bot.timeout,
    )

    # Bot components
    deduplicator = providers.Singleton(
        AlbumDeduplicator,
        store=album_store,
        memos=memos_client,
        ttl=config.provided.album_store.ttl,
    )
    pagination = providers.Singleton(
        PaginationController,
        memos=memos_client,
        telegram=telegram_client,
        limits=config.provided.limits,
        page_size=config.provided.memos.page_size,
        show_media=config.provided.memos.show_media,
    )
    pipeline = providers.Singleton(
        MessagePipeline,
        telegram=telegram_client,
        memos=memos_client,
        deduplicator=deduplicator,
        pagination=pagination,
        limits=config.provided.limits,
    )
