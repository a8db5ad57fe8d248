"""ChannelConfig -- Telegram 渠道配置加载

从环境变量加载配置。管理员身份在加载时一次性解析：
admin_chat_id = TELEGRAM_ADMIN_ID，未设置时回退为广播目标 TELEGRAM_CHAT_ID。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr, model_validator

log = structlog.get_logger()


class ChannelConfig(BaseModel):
    """Channel 包配置 -- 从环境变量加载

    环境变量:
        TELEGRAM_BOT_TOKEN: Bot 凭据
        TELEGRAM_CHAT_ID: 广播目标 chat id
        TELEGRAM_ADMIN_ID: 管理员 chat id（默认同 TELEGRAM_CHAT_ID）
        TELEGRAM_API_BASE: Bot API 地址（默认 https://api.telegram.org）
        SOLACE_TELEGRAM_TIMEOUT_S: 出站调用超时（秒，默认 10）
        SOLACE_POLL_INTERVAL_S: 轮询间隔（秒，默认 3）
        SOLACE_POLL_TIMEOUT_S: getUpdates 长轮询超时（秒，默认 1）
        SOLACE_POLLER_ENABLED: 是否启动指令轮询（默认 true）
    """

    bot_token: SecretStr = Field(
        default=SecretStr(""),
        description="Telegram Bot 凭据",
    )
    broadcast_chat_id: str = Field(default="", description="广播目标 chat id")
    admin_chat_id: str = Field(
        default="",
        description="管理员 chat id，为空时回退为 broadcast_chat_id",
    )
    api_base_url: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API 基础 URL",
    )
    timeout_s: float = Field(default=10, gt=0, description="出站调用超时（秒）")
    poll_interval_s: float = Field(default=3, gt=0, description="轮询间隔（秒）")
    poll_timeout_s: int = Field(
        default=1,
        ge=0,
        description="getUpdates 长轮询超时（秒），需小于轮询间隔",
    )
    poller_enabled: bool = Field(default=True, description="是否启动指令轮询")

    @model_validator(mode="after")
    def _resolve_admin(self) -> "ChannelConfig":
        if not self.admin_chat_id:
            self.admin_chat_id = self.broadcast_chat_id
        return self

    @property
    def has_token(self) -> bool:
        return bool(self.bot_token.get_secret_value())

    @property
    def can_broadcast(self) -> bool:
        return self.has_token and bool(self.broadcast_chat_id)


def mask_secret(s: str) -> str:
    """日志用凭据掩码：保留首尾各 6 位"""
    if not s:
        return "(missing)"
    if len(s) > 12:
        return f"{s[:6]}...{s[-6:]}"
    return s


def _read_number(env_var: str, cast, default):
    val = os.environ.get(env_var)
    if not val:
        return default
    try:
        return cast(val)
    except ValueError:
        log.warning(
            "invalid_number_config",
            env_var=env_var,
            value=val,
            fallback=default,
        )
        # 使用默认值，不阻塞启动
        return default


def load_channel_config() -> ChannelConfig:
    """从环境变量加载 Channel 配置

    Returns:
        ChannelConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TELEGRAM_BOT_TOKEN"):
        kwargs["bot_token"] = SecretStr(val)

    if val := os.environ.get("TELEGRAM_CHAT_ID"):
        kwargs["broadcast_chat_id"] = val.strip()

    if val := os.environ.get("TELEGRAM_ADMIN_ID"):
        kwargs["admin_chat_id"] = val.strip()

    if val := os.environ.get("TELEGRAM_API_BASE"):
        kwargs["api_base_url"] = val.rstrip("/")

    kwargs["timeout_s"] = _read_number("SOLACE_TELEGRAM_TIMEOUT_S", float, 10)
    kwargs["poll_interval_s"] = _read_number("SOLACE_POLL_INTERVAL_S", float, 3)
    kwargs["poll_timeout_s"] = _read_number("SOLACE_POLL_TIMEOUT_S", int, 1)

    enabled = os.environ.get("SOLACE_POLLER_ENABLED", "true").lower()
    kwargs["poller_enabled"] = enabled not in ("false", "0", "no")

    return ChannelConfig(**kwargs)
