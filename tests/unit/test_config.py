"""Tests for environment and YAML configuration loading."""

import pytest

from memogram.config import BotConfig, Config, LimitsConfig, MemosConfig


def memos_config(**env) -> MemosConfig:
    return MemosConfig(MEMOS_TOKEN="token", MEMOS_BASE_URL="https://memos.example.com/", **env)


class TestMemosConfig:
    """Test Memos settings normalization."""

    def test_base_url_trailing_slash_is_stripped(self):
        config = memos_config()

        assert config.base_url == "https://memos.example.com"
        assert config.api_url == "https://memos.example.com/api/v1"

    @pytest.mark.parametrize(
        "value, expected",
        [("5", 5), ("20", 20), ("0", 8), ("21", 8), ("-3", 8), ("abc", 8), ("", 8)],
    )
    def test_page_size_is_clamped(self, value, expected):
        assert memos_config(PAGE_SIZE=value).page_size == expected

    @pytest.mark.parametrize(
        "value, expected",
        [("1", True), ("true", True), ("TRUE", True), ("0", False), ("yes", False), ("", False)],
    )
    def test_show_media_flag(self, value, expected):
        assert memos_config(SHOW_MEDIA=value).show_media is expected

    def test_page_size_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAGE_SIZE", "3")

        assert memos_config().page_size == 3


class TestBotConfig:
    """Test webhook address selection."""

    def test_listen_host_defaults_to_localhost(self, monkeypatch):
        monkeypatch.delenv("BOT_LISTEN_HOST", raising=False)

        assert BotConfig().listen_host == "127.0.0.1"

    def test_polling_without_webhook_address(self, monkeypatch):
        monkeypatch.delenv("WEBHOOK_URL", raising=False)
        monkeypatch.delenv("WEBHOOK_DOMAIN", raising=False)

        config = BotConfig()

        assert config.public_webhook_url is None
        assert config.use_webhook is False

    def test_webhook_url_takes_priority(self, monkeypatch):
        monkeypatch.setenv("WEBHOOK_URL", "https://bot.example.com/hook")
        monkeypatch.setenv("WEBHOOK_DOMAIN", "other.example.com")

        assert BotConfig().public_webhook_url == "https://bot.example.com/hook"

    def test_webhook_url_from_domain(self, monkeypatch):
        monkeypatch.delenv("WEBHOOK_URL", raising=False)
        monkeypatch.setenv("WEBHOOK_DOMAIN", "bot.example.com")

        config = BotConfig()

        assert config.public_webhook_url == "https://bot.example.com/telegram/webhook"
        assert config.use_webhook is True


class TestLimits:
    """Test limits loading from YAML."""

    def test_bundled_limits_file(self):
        limits = Config().limits

        assert limits.max_media_bytes == 20 * 1024 * 1024
        assert limits.max_message_len == 3900
        assert limits.max_caption_len == 900
        assert limits.callback_data_len == 64

    def test_custom_limits_file(self, tmp_path):
        (tmp_path / "limits.yml").write_text(
            "media:\n  max_megabytes: 5\ntext:\n  max_message_length: 1000\n"
        )

        limits = Config(config_dir=tmp_path).limits

        assert limits.max_media_bytes == 5 * 1024 * 1024
        assert limits.max_message_len == 1000
        assert limits.max_caption_len == 900

    def test_missing_limits_file_uses_defaults(self, tmp_path):
        assert Config(config_dir=tmp_path).limits == LimitsConfig()
