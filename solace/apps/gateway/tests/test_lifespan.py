"""应用生命周期测试 -- 直接驱动 lifespan_context"""

from pathlib import Path

import pytest
from solace.gateway.main import create_app


@pytest.fixture
def app_env(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("SOLACE_DB_PATH", str(tmp_path / "db" / "solace.db"))
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
    for name in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID", "TELEGRAM_ADMIN_ID"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


class TestLifespan:
    async def test_starts_without_telegram(self, app_env):
        upload_dir = app_env / "uploads"
        app = create_app(upload_dir=upload_dir)

        async with app.router.lifespan_context(app):
            assert app.state.command_poller is None
            assert not app.state.notification_gateway.can_broadcast
            assert upload_dir.is_dir()
            assert (app_env / "db" / "solace.db").exists()

    async def test_poller_can_be_disabled(self, app_env, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123456:ABCDEFGHIJKLMNOP")
        monkeypatch.setenv("TELEGRAM_CHAT_ID", "1001")
        monkeypatch.setenv("SOLACE_POLLER_ENABLED", "false")
        app = create_app(upload_dir=app_env / "uploads")

        async with app.router.lifespan_context(app):
            assert app.state.command_poller is None
            assert app.state.notification_gateway.can_broadcast
            assert app.state.channel_config.admin_chat_id == "1001"

    async def test_store_init_failure_aborts(self, app_env, monkeypatch):
        blocker = app_env / "not-a-dir"
        blocker.write_text("x")
        monkeypatch.setenv("SOLACE_DB_PATH", str(blocker / "solace.db"))
        app = create_app(upload_dir=app_env / "uploads")

        with pytest.raises(OSError):
            async with app.router.lifespan_context(app):
                pass
