"""Configuration management for the memogram bot.

Handles all application configuration including environment variables, the
YAML limits file, and default settings. Provides structured configuration
classes for the bot, the Memos service, the album store and size limits.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PAGE_SIZE = 8
MAX_PAGE_SIZE = 20


class LimitsConfig(BaseSettings):
    """Size ceilings applied to media and outgoing text.

    Attributes:
        max_media_bytes: Largest attachment accepted, by declared and actual size.
        max_message_len: Character ceiling for plain chat messages.
        max_caption_len: Character ceiling for media captions.
        max_detail_media: Number of images shown with a memo detail.
        excerpt_len: Characters kept for memo labels in the list keyboard.
        callback_data_len: Budget for an encoded inline-button payload.
    """

    max_media_bytes: int = 20 * 1024 * 1024
    max_message_len: int = 3900
    max_caption_len: int = 900
    max_detail_media: int = 10
    excerpt_len: int = 10
    callback_data_len: int = 64


class AlbumStoreConfig(BaseSettings):
    """Persistence settings for photo album state.

    Attributes:
        redis_url: Redis connection URL, in-process storage when unset.
        ttl: Seconds an album entry lives after its last write.
        key_prefix: Namespace prepended to album ids.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    redis_url: str | None = Field(default=None, validation_alias="REDIS_URL")
    ttl: int = Field(default=3600, validation_alias="ALBUM_TTL")
    key_prefix: str = "memogram:album:"


class MemosConfig(BaseSettings):
    """Memos note service configuration.

    Attributes:
        token: Memos access token sent as a bearer credential.
        base_url: Root URL of the Memos instance, without the API path.
        page_size: Memos per list page, clamped to 1..20.
        show_media: Whether memo details also send their image attachments.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    token: str = Field(..., validation_alias="MEMOS_TOKEN")
    base_url: str = Field(..., validation_alias="MEMOS_BASE_URL")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, validation_alias="PAGE_SIZE")
    show_media: bool = Field(default=False, validation_alias="SHOW_MEDIA")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, value: Any) -> int:
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return DEFAULT_PAGE_SIZE
        if 1 <= parsed <= MAX_PAGE_SIZE:
            return parsed
        return DEFAULT_PAGE_SIZE

    @field_validator("show_media", mode="before")
    @classmethod
    def _parse_show_media(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in ("1", "true")

    @property
    def api_url(self) -> str:
        """REST API root of the Memos instance."""
        return f"{self.base_url}/api/v1"


class BotConfig(BaseSettings):
    """Main Telegram bot configuration.

    Attributes:
        bot_token: Telegram bot API token from environment.
        webhook_url: Full public webhook URL, takes priority over the domain.
        webhook_domain: Public domain used to derive the webhook URL.
        port: Server port for webhook mode.
        listen_host: Interface the webhook server binds to.
        timeout: HTTP request timeout in seconds.
        log_level: Root logging level name.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    bot_token: str = Field(..., validation_alias="BOT_TOKEN")
    webhook_url: str | None = Field(default=None, validation_alias="WEBHOOK_URL")
    webhook_domain: str | None = Field(default=None, validation_alias="WEBHOOK_DOMAIN")
    port: int = Field(default=8000, validation_alias="PORT")
    listen_host: str = Field(default="127.0.0.1", validation_alias="BOT_LISTEN_HOST")
    timeout: int = 20
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def public_webhook_url(self) -> str | None:
        """Get the webhook URL announced to Telegram.

        Returns:
            Configured URL, URL derived from the domain, or None for polling.
        """
        if self.webhook_url:
            return self.webhook_url
        if self.webhook_domain:
            return f"https://{self.webhook_domain}/telegram/webhook"
        return None

    @property
    def use_webhook(self) -> bool:
        """Determine if webhook mode should be used.

        Returns:
            True if a public webhook address is configured, False for polling mode.
        """
        return bool(self.public_webhook_url)


class Config:
    """Application configuration manager.

    Centralizes loading of environment settings and the YAML limits file,
    and provides typed access to each configuration section.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to memogram/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        self.bot = BotConfig()
        self.memos = MemosConfig()
        self.album_store = AlbumStoreConfig()
        self.limits = self._load_limits()

    def _load_limits(self) -> LimitsConfig:
        """Load size ceilings from limits.yml.

        Returns:
            LimitsConfig built from the file, or defaults if it is missing.
        """
        limits_path = self.config_dir / "limits.yml"
        if not limits_path.exists():
            return LimitsConfig()

        with open(limits_path) as f:
            data = yaml.safe_load(f) or {}

        media = data.get("media", {})
        text = data.get("text", {})
        keyboard = data.get("keyboard", {})
        return LimitsConfig(
            max_media_bytes=int(media.get("max_megabytes", 20)) * 1024 * 1024,
            max_detail_media=media.get("max_detail_items", 10),
            max_message_len=text.get("max_message_length", 3900),
            max_caption_len=text.get("max_caption_length", 900),
            excerpt_len=keyboard.get("excerpt_length", 10),
            callback_data_len=keyboard.get("callback_data_length", 64),
        )


@lru_cache()
def get_config() -> Config:
    """Return the process-wide configuration, loading it on first use."""
    return Config()
