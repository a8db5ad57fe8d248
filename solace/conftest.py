"""全局 pytest 配置 -- 临时 SQLite 数据库 + 模拟 Telegram Bot API fixture"""

import json
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import aiosqlite
import httpx
import pytest
import pytest_asyncio
from solace.channel import NotificationGateway, TelegramClient
from solace.core.store import StoreGroup, create_store_group
from solace.core.store.sqlite_init import init_db

TEST_BOT_TOKEN = "123456:TEST-TOKEN-abcdefghijkl"
BROADCAST_CHAT_ID = "1001"

# 各方法的默认成功响应
_DEFAULT_RESULTS: dict[str, Any] = {
    "sendMessage": {"message_id": 1},
    "sendVoice": {"message_id": 2, "voice": {"file_id": "tg-voice-1"}},
    "sendAudio": {"message_id": 3, "audio": {"file_id": "tg-audio-1"}},
    "getUpdates": [],
    "getFile": {"file_id": "tg-voice-1", "file_path": "voice/file_1.oga"},
    "getMe": {"id": 42, "is_bot": True, "username": "solace_bot"},
}


class FakeTelegram:
    """httpx.MockTransport 形式的 Telegram Bot API 替身

    按方法名排队预设响应（dict 或异常），未排队时返回默认成功响应；
    每次调用都记录在 calls 中。
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._queued: dict[str, list[Any]] = {}
        self.transport = httpx.MockTransport(self._handle)

    def queue(self, method: str, *responses: Any) -> None:
        self._queued.setdefault(method, []).extend(responses)

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def payloads(self, method: str) -> list[dict[str, Any]]:
        return [payload for m, payload in self.calls if m == method]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        if request.headers.get("content-type", "").startswith("application/json"):
            payload = json.loads(request.content or b"{}")
        else:
            payload = {"multipart": True, "raw": request.content}
        self.calls.append((method, payload))

        queued = self._queued.get(method)
        body = queued.pop(0) if queued else {"ok": True, "result": _DEFAULT_RESULTS.get(method)}
        if isinstance(body, Exception):
            raise body
        status = 200 if body.get("ok") else 400
        return httpx.Response(status, json=body)


def markup_error(description: str = "Bad Request: can't parse entities: unsupported start tag") -> dict:
    return {"ok": False, "error_code": 400, "description": description}


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    conn = await aiosqlite.connect(str(tmp_db_path))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供共享连接的 StoreGroup"""
    group = await create_store_group(str(tmp_db_path))
    yield group
    await group.conn.close()


@pytest.fixture
def fake_telegram() -> FakeTelegram:
    return FakeTelegram()


@pytest.fixture
def telegram_markup_error():
    """构造 Telegram 标记解析失败响应的工厂"""
    return markup_error


@pytest.fixture
def telegram_client(fake_telegram: FakeTelegram) -> TelegramClient:
    return TelegramClient(
        bot_token=TEST_BOT_TOKEN,
        api_base_url="https://telegram.test",
        timeout_s=1,
        transport=fake_telegram.transport,
    )


@pytest.fixture
def notification_gateway(telegram_client: TelegramClient) -> NotificationGateway:
    return NotificationGateway(telegram_client, BROADCAST_CHAT_ID)
