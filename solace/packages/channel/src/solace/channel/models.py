"""数据模型 -- 出站发送结果 + 入站消息

NotificationGateway 的所有操作都返回结果对象而不抛异常，
调用方据此区分"数据已保存"与"通知可能未送达"。
"""

import asyncio
import mimetypes
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class DeliveryKind(StrEnum):
    """媒体投递方式"""

    VOICE = "voice"
    AUDIO = "audio"


class LocalUpload(BaseModel):
    """已读入内存的本地文件，multipart 上传用

    同一文件的降级重试复用这份内容，不再重复读盘。
    """

    filename: str = Field(description="上传时使用的文件名")
    content: bytes = Field(description="文件内容")

    @property
    def mime_type(self) -> str:
        return mimetypes.guess_type(self.filename)[0] or "application/octet-stream"

    @classmethod
    async def load(cls, path: Path) -> "LocalUpload":
        """在线程中读取文件，不阻塞事件循环"""
        content = await asyncio.to_thread(path.read_bytes)
        return cls(filename=path.name, content=content)


class SendResult(BaseModel):
    """文本消息发送结果"""

    ok: bool = Field(description="是否送达")
    response: dict[str, Any] | None = Field(
        default=None,
        description="Telegram 原始响应（最终一次尝试）",
    )
    is_fallback: bool = Field(default=False, description="是否为纯文本降级重试")
    fallback_reason: str = Field(default="", description="降级原因（首次尝试的错误描述）")
    error: str = Field(default="", description="失败原因")


class MediaDeliveryResult(BaseModel):
    """按 file_id 转发媒体的结果"""

    ok: bool = Field(description="是否送达")
    delivery: DeliveryKind | None = Field(default=None, description="成功的投递方式")
    response: dict[str, Any] | None = Field(default=None, description="成功时的原始响应")
    errors: list[str] = Field(default_factory=list, description="各次尝试的失败原因")


class UploadResult(BaseModel):
    """本地文件上传结果"""

    ok: bool = Field(description="是否上传成功")
    delivery: DeliveryKind | None = Field(default=None, description="上传使用的投递方式")
    remote_token: str | None = Field(default=None, description="Telegram 分配的 file_id")
    file_url: str | None = Field(default=None, description="可下载的限时 URL")
    response: dict[str, Any] | None = Field(default=None, description="Telegram 原始响应")
    error: str = Field(default="", description="失败原因")


class InboundMessage(BaseModel):
    """标准化后的入站消息（来自 getUpdates）"""

    update_id: int = Field(description="Telegram update 标识，单调递增")
    chat_id: str | None = Field(default=None, description="来源 chat id")
    text: str | None = Field(default=None, description="消息文本")
    caption: str | None = Field(default=None, description="媒体消息说明文字")

    @property
    def content(self) -> str:
        """指令匹配用内容：优先 text，缺失时使用 caption"""
        return (self.text or self.caption or "").strip()

    @classmethod
    def from_update(cls, update: dict[str, Any]) -> "InboundMessage | None":
        """由 Telegram update 构建；非 message / edited_message 的 update 返回 None"""
        msg = update.get("message") or update.get("edited_message")
        if not isinstance(msg, dict):
            return None
        chat = msg.get("chat") or {}
        chat_id = chat.get("id")
        return cls(
            update_id=update["update_id"],
            chat_id=str(chat_id) if chat_id is not None else None,
            text=msg.get("text"),
            caption=msg.get("caption"),
        )
