"""apps/gateway 测试配置 -- FastAPI app + 模拟 Telegram 的服务 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from solace.gateway.services.command_interpreter import CommandInterpreter
from solace.gateway.services.delivery import DeliveryService
from solace.gateway.services.submission_service import SubmissionService

ADMIN_CHAT_ID = "1001"
STRANGER_CHAT_ID = "2002"


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def delivery_service(notification_gateway, upload_dir) -> DeliveryService:
    return DeliveryService(notification_gateway, upload_dir)


@pytest.fixture
def submission_service(store_group, delivery_service) -> SubmissionService:
    return SubmissionService(store_group, delivery_service)


@pytest.fixture
def interpreter(store_group, notification_gateway) -> CommandInterpreter:
    return CommandInterpreter(store_group, notification_gateway, admin_chat_id=ADMIN_CHAT_ID)


@pytest_asyncio.fixture
async def test_app(monkeypatch, upload_dir, store_group, notification_gateway, submission_service):
    """创建测试用 FastAPI app，手动初始化 lifespan 状态"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from solace.gateway.main import create_app

    app = create_app(upload_dir=upload_dir)
    app.state.store_group = store_group
    app.state.notification_gateway = notification_gateway
    app.state.submission_service = submission_service
    app.state.command_poller = None
    yield app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac
