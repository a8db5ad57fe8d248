"""Solace Channel -- Telegram 出站通知与入站更新

packages/channel 的公开接口导出。
"""

# 核心组件
from .client import TelegramClient

# 配置
from .config import ChannelConfig, load_channel_config, mask_secret

# 异常
from .exceptions import ChannelError, ChannelUnreachableError
from .markup import escape_html, is_markup_error

# 数据模型
from .models import (
    DeliveryKind,
    InboundMessage,
    LocalUpload,
    MediaDeliveryResult,
    SendResult,
    UploadResult,
)
from .notifier import VOICE_EXTENSIONS, NotificationGateway

__all__ = [
    "TelegramClient",
    "NotificationGateway",
    "VOICE_EXTENSIONS",
    "ChannelConfig",
    "load_channel_config",
    "mask_secret",
    "ChannelError",
    "ChannelUnreachableError",
    "escape_html",
    "is_markup_error",
    "DeliveryKind",
    "InboundMessage",
    "LocalUpload",
    "SendResult",
    "MediaDeliveryResult",
    "UploadResult",
]
