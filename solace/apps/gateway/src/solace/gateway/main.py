"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭、Telegram 组件初始化、指令轮询启停、路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from solace.channel import (
    NotificationGateway,
    TelegramClient,
    load_channel_config,
    mask_secret,
)
from solace.core.config import UPLOAD_URL_PREFIX, get_db_path, get_upload_dir
from solace.core.store import create_store_group

from .errors import register_exception_handlers
from .middleware.body_limit_mw import BodySizeLimitMiddleware
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import diary, grievances, health, moods, notify, telegram_files, uploads
from .services.command_interpreter import CommandInterpreter
from .services.command_poller import CommandPoller
from .services.delivery import DeliveryService
from .services.submission_service import SubmissionService

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 Store 与渠道组件，关闭时停止轮询并清理连接"""
    # 启动：初始化 Store（失败则终止启动）
    db_path = get_db_path()
    try:
        store_group = await create_store_group(db_path)
    except (aiosqlite.Error, OSError) as e:
        log.error("store_init_failed", db_path=db_path, error=str(e))
        raise
    app.state.store_group = store_group

    upload_dir: Path = app.state.upload_dir
    upload_dir.mkdir(parents=True, exist_ok=True)

    # Telegram 组件
    channel_config = load_channel_config()
    app.state.channel_config = channel_config
    bot_token = channel_config.bot_token.get_secret_value()
    client = TelegramClient(
        bot_token=bot_token,
        api_base_url=channel_config.api_base_url,
        timeout_s=channel_config.timeout_s,
    )
    gateway = NotificationGateway(client, channel_config.broadcast_chat_id)
    app.state.notification_gateway = gateway
    app.state.submission_service = SubmissionService(
        store_group,
        DeliveryService(gateway, upload_dir),
    )

    log.info(
        "startup_config",
        telegram_bot_token=mask_secret(bot_token),
        telegram_chat_id="(set)" if channel_config.broadcast_chat_id else "(missing)",
        telegram_admin_id="(set)" if channel_config.admin_chat_id else "(missing)",
        db_path=db_path,
        upload_dir=str(upload_dir),
    )

    # 指令轮询：有 Bot 凭据且未被禁用时启动
    poller = None
    if channel_config.has_token and channel_config.poller_enabled:
        interpreter = CommandInterpreter(store_group, gateway, channel_config.admin_chat_id)
        poller = CommandPoller(
            client,
            interpreter,
            interval_s=channel_config.poll_interval_s,
            poll_timeout_s=channel_config.poll_timeout_s,
        )
        poller.start()
    else:
        log.info(
            "command_poller_disabled",
            has_token=channel_config.has_token,
            poller_enabled=channel_config.poller_enabled,
        )
    app.state.command_poller = poller

    yield

    # 关闭：先停轮询，再关闭数据库连接
    if poller is not None:
        await poller.stop()
    await store_group.conn.close()


def create_app(upload_dir: Path | None = None) -> FastAPI:
    """创建 FastAPI 应用实例

    Args:
        upload_dir: 本地上传目录，默认取 get_upload_dir()
    """
    app = FastAPI(
        title="Solace Gateway",
        version="0.1.0",
        description="Solace 吐槽 / 心情 / 日记 API 与 Telegram 中继",
        lifespan=lifespan,
    )
    app.state.upload_dir = upload_dir or get_upload_dir()

    # 注册中间件（后注册的在外层：Logging -> Trace -> BodySizeLimit -> CORS）
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    # 初始化日志
    setup_logging()
    setup_logfire(app)

    # 注册路由
    app.include_router(health.router, tags=["health"])
    app.include_router(grievances.router, tags=["grievances"])
    app.include_router(moods.router, tags=["moods"])
    app.include_router(diary.router, tags=["diary"])
    app.include_router(notify.router, tags=["notify"])
    app.include_router(uploads.router, tags=["uploads"])
    app.include_router(telegram_files.router, tags=["telegram"])

    # 上传文件静态服务（目录在 lifespan 中创建）
    app.mount(
        UPLOAD_URL_PREFIX,
        StaticFiles(directory=str(app.state.upload_dir), check_dir=False),
        name="uploads",
    )

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
