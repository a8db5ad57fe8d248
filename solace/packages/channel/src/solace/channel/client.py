"""TelegramClient -- Telegram Bot API 调用封装

所有调用通过 httpx.AsyncClient 发出并带显式超时，
挂起的出站调用不会无限期阻塞下一次轮询。
API 明确拒绝（ok=false）时原样返回响应体，由上层决定是否降级重试。
"""

import time
from pathlib import Path
from typing import Any

import httpx
import structlog

from .exceptions import ChannelError, ChannelUnreachableError
from .models import LocalUpload

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

# 连接类异常类型集合（触发 ChannelUnreachableError）
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    OSError,
    TimeoutError,
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.TimeoutException,
    httpx.NetworkError,
)


class TelegramClient:
    """Telegram Bot API 客户端"""

    def __init__(
        self,
        bot_token: str,
        api_base_url: str = "https://api.telegram.org",
        timeout_s: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化 Bot API 客户端

        Args:
            bot_token: Bot 凭据
            api_base_url: API 基础 URL
            timeout_s: 单次请求超时（秒）
            transport: 自定义 httpx transport（测试中注入 MockTransport）
        """
        self._bot_token = bot_token
        self._api_base_url = api_base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._bot_token)

    def _method_url(self, method: str) -> str:
        return f"{self._api_base_url}/bot{self._bot_token}/{method}"

    def _redacted_url(self, method: str) -> str:
        """日志与异常中使用的 URL（不含凭据）"""
        return f"{self._api_base_url}/bot***/{method}"

    async def call(
        self,
        method: str,
        *,
        json: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        timeout_s: float | None = None,
    ) -> dict[str, Any]:
        """调用 Bot API 方法

        Returns:
            Telegram 响应体（含 ok 字段）

        Raises:
            ChannelUnreachableError: 连接失败或超时
            ChannelError: 响应不是 JSON 对象
        """
        start_time = time.monotonic()
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=timeout_s or self._timeout_s,
            ) as http_client:
                resp = await http_client.post(
                    self._method_url(method),
                    json=json,
                    data=data,
                    files=files,
                )
        except _CONNECTION_ERROR_TYPES as e:
            log.warning(
                "telegram_call_unreachable",
                method=method,
                error_type=type(e).__name__,
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )
            raise ChannelUnreachableError(self._redacted_url(method), e) from e
        except httpx.HTTPError as e:
            raise ChannelError(f"Telegram 调用失败: {method} -- {e}") from e

        duration_ms = int((time.monotonic() - start_time) * 1000)

        try:
            body = resp.json()
        except ValueError as e:
            raise ChannelError(
                f"Telegram 返回非 JSON 响应: {method} HTTP {resp.status_code}"
            ) from e
        if not isinstance(body, dict):
            raise ChannelError(f"Telegram 返回格式异常: {method}")

        if body.get("ok"):
            log.debug("telegram_call_completed", method=method, duration_ms=duration_ms)
        else:
            log.warning(
                "telegram_api_error",
                method=method,
                error_code=body.get("error_code"),
                description=body.get("description"),
                duration_ms=duration_ms,
            )
        return body

    async def send_message(
        self,
        chat_id: str,
        text: str,
        parse_mode: str | None = None,
    ) -> dict[str, Any]:
        """sendMessage；parse_mode 为 None 时按纯文本发送"""
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        return await self.call("sendMessage", json=payload)

    async def send_voice(
        self,
        chat_id: str,
        voice: str | Path | LocalUpload,
        caption: str | None = None,
        parse_mode: str | None = None,
    ) -> dict[str, Any]:
        """sendVoice；voice 为 file_id 字符串、本地文件路径或已读入的文件"""
        return await self._send_media("sendVoice", "voice", chat_id, voice, caption, parse_mode)

    async def send_audio(
        self,
        chat_id: str,
        audio: str | Path | LocalUpload,
        caption: str | None = None,
        parse_mode: str | None = None,
    ) -> dict[str, Any]:
        """sendAudio；audio 为 file_id 字符串、本地文件路径或已读入的文件"""
        return await self._send_media("sendAudio", "audio", chat_id, audio, caption, parse_mode)

    async def _send_media(
        self,
        method: str,
        field: str,
        chat_id: str,
        media: str | Path | LocalUpload,
        caption: str | None,
        parse_mode: str | None,
    ) -> dict[str, Any]:
        if isinstance(media, Path):
            media = await LocalUpload.load(media)
        if isinstance(media, LocalUpload):
            # 本地文件：multipart 上传
            data = {"chat_id": str(chat_id)}
            if caption:
                data["caption"] = caption
            if parse_mode:
                data["parse_mode"] = parse_mode
            return await self.call(
                method,
                data=data,
                files={field: (media.filename, media.content, media.mime_type)},
            )

        payload: dict[str, Any] = {"chat_id": chat_id, field: media}
        if caption:
            payload["caption"] = caption
        if parse_mode:
            payload["parse_mode"] = parse_mode
        return await self.call(method, json=payload)

    async def get_updates(self, offset: int, timeout: int = 1) -> dict[str, Any]:
        """getUpdates 长轮询

        HTTP 超时 = 长轮询超时 + 单次请求超时，避免服务端正常挂起被误判为超时。
        """
        return await self.call(
            "getUpdates",
            json={
                "offset": offset,
                "timeout": timeout,
                "allowed_updates": ["message", "edited_message"],
            },
            timeout_s=timeout + self._timeout_s,
        )

    async def get_file(self, file_id: str) -> dict[str, Any]:
        """getFile：查询 file_id 对应的服务端路径"""
        return await self.call("getFile", json={"file_id": file_id})

    def file_download_url(self, file_path: str) -> str:
        """由 getFile 返回的 file_path 拼接下载 URL（含凭据，限时有效）"""
        return f"{self._api_base_url}/file/bot{self._bot_token}/{file_path}"

    async def health_check(self) -> bool:
        """检查 Bot 凭据与 API 可达性（getMe）

        Returns:
            True 如果 getMe 成功，False 如果不可达或凭据无效

        注意: 此方法不抛出异常，所有异常内部捕获并返回 False。
        """
        if not self.configured:
            return False
        try:
            body = await self.call("getMe", timeout_s=HEALTH_CHECK_TIMEOUT_S)
            return bool(body.get("ok"))
        except Exception as e:
            log.debug("health_check_failed", error=str(e))
            return False
