"""集成测试共享 fixture

完整 app（中间件、路由、异常映射）+ 共享同一 StoreGroup 与模拟 Telegram 的指令轮询器。
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from solace.gateway.services.command_interpreter import CommandInterpreter
from solace.gateway.services.command_poller import CommandPoller
from solace.gateway.services.delivery import DeliveryService
from solace.gateway.services.submission_service import SubmissionService


@pytest_asyncio.fixture
async def integration_app(
    monkeypatch, tmp_path: Path, store_group, notification_gateway, telegram_client
):
    """集成测试用 FastAPI app"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from solace.gateway.main import create_app

    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()
    app = create_app(upload_dir=upload_dir)

    app.state.store_group = store_group
    app.state.notification_gateway = notification_gateway
    app.state.submission_service = SubmissionService(
        store_group,
        DeliveryService(notification_gateway, upload_dir),
    )
    interpreter = CommandInterpreter(
        store_group,
        notification_gateway,
        admin_chat_id=notification_gateway.broadcast_chat_id,
    )
    # 轮询由测试逐次驱动（poll_once），不启动后台任务
    app.state.command_poller = CommandPoller(telegram_client, interpreter, poll_timeout_s=0)

    yield app


@pytest_asyncio.fixture
async def poller(integration_app) -> CommandPoller:
    return integration_app.state.command_poller


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
