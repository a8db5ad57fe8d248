"""DeliveryService -- 提交通知的投递决策表

每次提交只评估一次决策表：(媒体种类, 本地文件是否可用) -> 投递策略。

| 媒体种类       | 本地文件可用 | 策略          |
|----------------|--------------|---------------|
| 无             | -            | text          |
| remote_token   | -            | relay_token   |
| local          | 是           | upload_local  |
| local          | 否           | text          |

渠道未配置时一律 skipped。媒体策略失败后以转义后的文本摘要做最后一次尝试，
最终产出单个 DeliveryOutcome。
"""

from enum import StrEnum
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import structlog
from pydantic import BaseModel, Field
from solace.channel import DeliveryKind, NotificationGateway
from solace.core.config import UPLOAD_URL_PREFIX
from solace.core.models import MediaKind, MediaReference

log = structlog.get_logger()


class DeliveryStrategy(StrEnum):
    """投递策略"""

    RELAY_TOKEN = "relay_token"
    UPLOAD_LOCAL = "upload_local"
    TEXT = "text"
    SKIPPED = "skipped"


# (媒体种类, 本地文件可用) -> 策略
_DECISION_TABLE: dict[tuple[MediaKind | None, bool], DeliveryStrategy] = {
    (None, False): DeliveryStrategy.TEXT,
    (None, True): DeliveryStrategy.TEXT,
    (MediaKind.REMOTE_TOKEN, False): DeliveryStrategy.RELAY_TOKEN,
    (MediaKind.REMOTE_TOKEN, True): DeliveryStrategy.RELAY_TOKEN,
    (MediaKind.LOCAL, True): DeliveryStrategy.UPLOAD_LOCAL,
    (MediaKind.LOCAL, False): DeliveryStrategy.TEXT,
}


def choose_strategy(
    media: MediaReference | None,
    local_available: bool,
    channel_ready: bool,
) -> DeliveryStrategy:
    """查决策表得到投递策略"""
    if not channel_ready:
        return DeliveryStrategy.SKIPPED
    return _DECISION_TABLE[(media.kind if media else None, local_available)]


def resolve_local_blob(audio_url: str, upload_dir: Path) -> Path | None:
    """将 /uploads/<name> 形式的本地引用解析为上传目录中的文件

    只接受上传目录下的单层文件名；文件不存在时返回 None。
    """
    path = urlparse(audio_url).path
    prefix = f"{UPLOAD_URL_PREFIX}/"
    if not path.startswith(prefix):
        return None
    name = path[len(prefix):]
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        return None
    candidate = upload_dir / name
    return candidate if candidate.is_file() else None


class DeliveryOutcome(BaseModel):
    """单次提交的通知投递结果"""

    ok: bool = Field(description="通知是否送达")
    strategy: DeliveryStrategy = Field(description="决策表选出的策略")
    text_fallback: bool = Field(default=False, description="媒体策略失败后是否改发文本")
    markup_fallback: bool = Field(default=False, description="文本是否降级为纯文本发送")
    delivery: DeliveryKind | None = Field(default=None, description="媒体投递方式")
    remote_token: str | None = Field(default=None, description="上传后 Telegram 分配的 file_id")
    file_url: str | None = Field(default=None, description="上传后可下载的 URL")
    response: dict[str, Any] | None = Field(default=None, description="最终一次尝试的原始响应")
    errors: list[str] = Field(default_factory=list, description="各次尝试的失败原因")


class DeliveryService:
    """提交通知投递服务"""

    def __init__(self, gateway: NotificationGateway, upload_dir: Path) -> None:
        self._gateway = gateway
        self._upload_dir = upload_dir

    @property
    def gateway(self) -> NotificationGateway:
        return self._gateway

    async def deliver(
        self,
        text: str,
        media: MediaReference | None = None,
        caption: str | None = None,
    ) -> DeliveryOutcome:
        """按决策表投递一次通知

        Args:
            text: 已转义的 HTML 文本摘要
            media: 提交携带的媒体引用
            caption: 媒体说明文字，默认与 text 相同
        """
        local_path = None
        if media is not None and media.kind == MediaKind.LOCAL:
            local_path = resolve_local_blob(media.ref, self._upload_dir)

        strategy = choose_strategy(media, local_path is not None, self._gateway.can_broadcast)
        caption = caption if caption is not None else text
        errors: list[str] = []

        if strategy == DeliveryStrategy.SKIPPED:
            return DeliveryOutcome(ok=False, strategy=strategy, errors=["no-telegram-config"])

        if strategy == DeliveryStrategy.RELAY_TOKEN:
            relay = await self._gateway.send_media_by_token(
                self._gateway.broadcast_chat_id, media.ref, caption
            )
            if relay.ok:
                return DeliveryOutcome(
                    ok=True,
                    strategy=strategy,
                    delivery=relay.delivery,
                    response=relay.response,
                    errors=relay.errors,
                )
            errors.extend(relay.errors)

        elif strategy == DeliveryStrategy.UPLOAD_LOCAL:
            upload = await self._gateway.upload_local_file(local_path, caption)
            if upload.ok:
                return DeliveryOutcome(
                    ok=True,
                    strategy=strategy,
                    delivery=upload.delivery,
                    remote_token=upload.remote_token,
                    file_url=upload.file_url,
                    response=upload.response,
                )
            errors.append(upload.error)

        elif media is not None and media.kind == MediaKind.LOCAL:
            errors.append(f"local media unavailable: {media.ref}")

        text_fallback = strategy != DeliveryStrategy.TEXT
        if text_fallback:
            log.warning("media_delivery_failed_sending_text", strategy=strategy.value, errors=errors)

        sent = await self._gateway.broadcast(text)
        if sent.error:
            errors.append(sent.error)
        return DeliveryOutcome(
            ok=sent.ok,
            strategy=strategy,
            text_fallback=text_fallback,
            markup_fallback=sent.is_fallback,
            response=sent.response,
            errors=errors,
        )
