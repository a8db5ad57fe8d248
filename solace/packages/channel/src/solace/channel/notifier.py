"""NotificationGateway -- 出站通知与降级

两条降级链：
1. 标记降级：先以 HTML parse_mode 发送，Telegram 报告标记解析失败时
   去掉 parse_mode 以纯文本重试一次，调用方看到的是纯文本那次的结果。
2. 媒体降级：按 file_id 转发时先尝试 sendVoice，失败再尝试 sendAudio。

本组件从不向外抛出异常：失败被记录日志并写入结果对象，
调用方把失败视为"已记录并吞掉"，不影响触发它的请求。
"""

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import structlog

from .client import TelegramClient
from .markup import CAPTION_MAX_LENGTH, MESSAGE_MAX_LENGTH, is_markup_error, truncate
from .models import DeliveryKind, LocalUpload, MediaDeliveryResult, SendResult, UploadResult

log = structlog.get_logger()

PARSE_MODE_HTML = "HTML"

# 窄带语音格式走 sendVoice，其余音频走 sendAudio
VOICE_EXTENSIONS = frozenset({".ogg", ".oga", ".opus"})

NOT_CONFIGURED = "no-telegram-config"


def _extract_file_id(response: dict[str, Any] | None) -> str | None:
    """从 sendVoice / sendAudio 响应中取出 Telegram 分配的 file_id"""
    message = (response or {}).get("result") or {}
    # sendVoice 遇到非 OGG 文件时 Telegram 可能以 audio / document 形式保存
    for key in ("voice", "audio", "document"):
        media = message.get(key)
        if isinstance(media, dict) and media.get("file_id"):
            return media["file_id"]
    return None


class NotificationGateway:
    """出站通知网关

    广播目标固定（TELEGRAM_CHAT_ID），回复目标由调用方指定。
    """

    def __init__(self, client: TelegramClient, broadcast_chat_id: str = "") -> None:
        """
        Args:
            client: Telegram Bot API 客户端
            broadcast_chat_id: 广播目标 chat id，为空时广播一律跳过
        """
        self._client = client
        self._broadcast_chat_id = broadcast_chat_id

    @property
    def client(self) -> TelegramClient:
        return self._client

    @property
    def broadcast_chat_id(self) -> str:
        return self._broadcast_chat_id

    @property
    def can_broadcast(self) -> bool:
        return self._client.configured and bool(self._broadcast_chat_id)

    async def broadcast(self, text: str, markup: bool = True) -> SendResult:
        """向广播目标发送文本"""
        if not self.can_broadcast:
            log.warning("telegram_not_configured_skip_broadcast")
            return SendResult(ok=False, error=NOT_CONFIGURED)
        return await self.send_to(self._broadcast_chat_id, text, markup=markup)

    async def send_to(self, chat_id: str, text: str, markup: bool = True) -> SendResult:
        """向指定 chat 发送文本

        Args:
            chat_id: 目标 chat id
            text: 消息文本（markup=True 时插值部分须已转义）
            markup: 是否按 HTML 解析
        """
        if not self._client.configured or not chat_id:
            log.warning("telegram_not_configured_skip_send")
            return SendResult(ok=False, error=NOT_CONFIGURED)
        text = truncate(text, MESSAGE_MAX_LENGTH)
        return await self._send_with_fallback(
            "sendMessage",
            lambda parse_mode: self._client.send_message(chat_id, text, parse_mode),
            markup=markup,
        )

    async def send_media_by_token(
        self,
        chat_id: str,
        remote_token: str,
        caption: str | None = None,
    ) -> MediaDeliveryResult:
        """按 Telegram file_id 转发媒体：先 voice，失败再 audio

        Returns:
            MediaDeliveryResult，delivery 为成功的投递方式；全部失败时 errors 汇总原因
        """
        if not self._client.configured or not chat_id:
            log.warning("telegram_not_configured_skip_media")
            return MediaDeliveryResult(ok=False, errors=[NOT_CONFIGURED])

        caption = truncate(caption, CAPTION_MAX_LENGTH) if caption else None
        attempts = (
            (DeliveryKind.VOICE, self._client.send_voice),
            (DeliveryKind.AUDIO, self._client.send_audio),
        )
        errors: list[str] = []
        for kind, send in attempts:
            result = await self._send_with_fallback(
                f"send_{kind.value}",
                lambda parse_mode: send(chat_id, remote_token, caption, parse_mode),
                markup=caption is not None,
            )
            if result.ok:
                if errors:
                    log.info(
                        "media_fallback_activated",
                        delivery=kind.value,
                        fallback_reason="; ".join(errors),
                    )
                return MediaDeliveryResult(
                    ok=True,
                    delivery=kind,
                    response=result.response,
                    errors=errors,
                )
            errors.append(f"{kind.value}: {result.error}")

        log.error("media_relay_failed", errors=errors)
        return MediaDeliveryResult(ok=False, errors=errors)

    async def upload_local_file(
        self,
        local_path: str | Path,
        caption: str | None = None,
        chat_id: str | None = None,
    ) -> UploadResult:
        """上传本地文件到 Telegram

        .ogg/.oga/.opus 以 voice 上传，其余以 audio 上传。
        成功后返回 file_id 以及通过 getFile 解析出的下载 URL。
        """
        target = chat_id or self._broadcast_chat_id
        if not self._client.configured or not target:
            log.warning("telegram_not_configured_skip_upload")
            return UploadResult(ok=False, error=NOT_CONFIGURED)

        path = Path(local_path)
        if not path.is_file():
            log.warning("upload_source_missing", file=path.name)
            return UploadResult(ok=False, error=f"local file not found: {path.name}")

        kind = DeliveryKind.VOICE if path.suffix.lower() in VOICE_EXTENSIONS else DeliveryKind.AUDIO
        send = self._client.send_voice if kind is DeliveryKind.VOICE else self._client.send_audio
        caption = truncate(caption, CAPTION_MAX_LENGTH) if caption else None

        # 只读一次盘，纯文本重试复用同一份内容
        try:
            upload = await LocalUpload.load(path)
        except OSError as e:
            log.warning("upload_source_unreadable", file=path.name, error_type=type(e).__name__)
            return UploadResult(ok=False, delivery=kind, error=f"local file unreadable: {path.name}")

        result = await self._send_with_fallback(
            f"upload_{kind.value}",
            lambda parse_mode: send(target, upload, caption, parse_mode),
            markup=caption is not None,
        )
        if not result.ok:
            return UploadResult(
                ok=False,
                delivery=kind,
                response=result.response,
                error=result.error,
            )

        remote_token = _extract_file_id(result.response)
        file_url = await self.resolve_file_url(remote_token) if remote_token else None
        log.info(
            "local_file_uploaded",
            delivery=kind.value,
            file=path.name,
            has_remote_token=remote_token is not None,
        )
        return UploadResult(
            ok=True,
            delivery=kind,
            remote_token=remote_token,
            file_url=file_url,
            response=result.response,
        )

    async def resolve_file_url(self, remote_token: str) -> str | None:
        """解析 file_id 的限时下载 URL，无法解析时返回 None"""
        if not self._client.configured or not remote_token:
            return None
        try:
            body = await self._client.get_file(remote_token)
        except Exception as e:
            log.warning("resolve_file_url_failed", error=str(e), error_type=type(e).__name__)
            return None
        file_path = (body.get("result") or {}).get("file_path") if body.get("ok") else None
        if not file_path:
            return None
        return self._client.file_download_url(file_path)

    async def _send_with_fallback(
        self,
        action: str,
        send: Callable[[str | None], Awaitable[dict[str, Any]]],
        markup: bool,
    ) -> SendResult:
        """执行一次发送，标记被拒时以纯文本重试一次

        Args:
            action: 日志中的动作名
            send: 以 parse_mode 为参数的发送函数
            markup: 首次尝试是否使用 HTML parse_mode
        """
        parse_mode = PARSE_MODE_HTML if markup else None
        try:
            response = await send(parse_mode)
        except Exception as e:
            log.warning(
                "telegram_send_failed",
                action=action,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SendResult(ok=False, error=str(e))

        if response.get("ok"):
            return SendResult(ok=True, response=response)

        if parse_mode is None or not is_markup_error(response):
            return SendResult(
                ok=False,
                response=response,
                error=str(response.get("description", "telegram api error")),
            )

        # 标记解析失败：去掉 parse_mode 重试一次
        fallback_reason = str(response.get("description", ""))
        log.info(
            "markup_rejected_retry_plain",
            action=action,
            fallback_reason=fallback_reason,
        )
        try:
            plain = await send(None)
        except Exception as e:
            log.warning(
                "telegram_plain_retry_failed",
                action=action,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SendResult(
                ok=False,
                is_fallback=True,
                fallback_reason=fallback_reason,
                error=str(e),
            )

        ok = bool(plain.get("ok"))
        return SendResult(
            ok=ok,
            response=plain,
            is_fallback=True,
            fallback_reason=fallback_reason,
            error="" if ok else str(plain.get("description", "telegram api error")),
        )
