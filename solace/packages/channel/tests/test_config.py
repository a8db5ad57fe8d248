"""ChannelConfig 加载测试"""

import pytest
from solace.channel import load_channel_config, mask_secret

_ENV_VARS = (
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
    "TELEGRAM_ADMIN_ID",
    "TELEGRAM_API_BASE",
    "SOLACE_TELEGRAM_TIMEOUT_S",
    "SOLACE_POLL_INTERVAL_S",
    "SOLACE_POLL_TIMEOUT_S",
    "SOLACE_POLLER_ENABLED",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestLoadChannelConfig:
    def test_defaults(self):
        config = load_channel_config()
        assert config.has_token is False
        assert config.can_broadcast is False
        assert config.api_base_url == "https://api.telegram.org"
        assert config.poll_interval_s == 3
        assert config.poller_enabled is True

    def test_admin_falls_back_to_broadcast(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
        monkeypatch.setenv("TELEGRAM_CHAT_ID", "1001")
        config = load_channel_config()
        assert config.admin_chat_id == "1001"
        assert config.can_broadcast is True

    def test_explicit_admin(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_CHAT_ID", "1001")
        monkeypatch.setenv("TELEGRAM_ADMIN_ID", "2002")
        assert load_channel_config().admin_chat_id == "2002"

    def test_token_is_secret(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:super-secret")
        config = load_channel_config()
        assert "super-secret" not in repr(config)
        assert config.bot_token.get_secret_value() == "123:super-secret"

    def test_invalid_number_falls_back(self, monkeypatch):
        monkeypatch.setenv("SOLACE_POLL_INTERVAL_S", "often")
        monkeypatch.setenv("SOLACE_TELEGRAM_TIMEOUT_S", "2.5")
        config = load_channel_config()
        assert config.poll_interval_s == 3
        assert config.timeout_s == 2.5

    @pytest.mark.parametrize("value", ["false", "0", "no", "FALSE"])
    def test_poller_disabled(self, monkeypatch, value):
        monkeypatch.setenv("SOLACE_POLLER_ENABLED", value)
        assert load_channel_config().poller_enabled is False


class TestMaskSecret:
    def test_missing(self):
        assert mask_secret("") == "(missing)"

    def test_long_secret_masked(self):
        assert mask_secret("1234567890:ABCDEFGHIJKL") == "123456...GHIJKL"

    def test_short_secret_unchanged(self):
        assert mask_secret("short") == "short"
