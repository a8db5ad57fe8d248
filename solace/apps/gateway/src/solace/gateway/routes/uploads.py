"""音频上传路由

POST /upload-audio: multipart 字段 file（上限 MAX_UPLOAD_BYTES，超出返回 413；
声明的 Content-Length 明显超限时由 BodySizeLimitMiddleware 在解析前拒绝），
可选 caption 与 relay。文件以 ULID 重命名后存入上传目录，经 /uploads/<name> 对外提供；
relay=true 时同时上传到 Telegram 并返回 file_id 与下载 URL。
"""

import asyncio
import re
from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from solace.channel import NotificationGateway, escape_html
from solace.core.config import MAX_UPLOAD_BYTES, UPLOAD_URL_PREFIX
from solace.core.exceptions import InputValidationError
from ulid import ULID

from ..deps import get_notification_gateway
from ..errors import error_response

log = structlog.get_logger()

router = APIRouter()

_CHUNK_BYTES = 64 * 1024
_SAFE_SUFFIX_RE = re.compile(r"^\.[a-z0-9]{1,8}$")


def _stored_name(filename: str) -> str:
    """生成存储文件名：ULID + 原扩展名（扩展名不合法时丢弃）"""
    suffix = Path(filename).suffix.lower()
    if not _SAFE_SUFFIX_RE.match(suffix):
        suffix = ""
    return f"{ULID()}{suffix}"


async def _save_upload(file: UploadFile, dest: Path, max_bytes: int) -> int | None:
    """分块写入磁盘，超出上限时返回 None

    磁盘读写放到线程中执行；未完整写入（超限或读取出错）时删除半成品。
    """
    size = 0
    completed = False
    out = await asyncio.to_thread(dest.open, "wb")
    try:
        while chunk := await file.read(_CHUNK_BYTES):
            size += len(chunk)
            if size > max_bytes:
                return None
            await asyncio.to_thread(out.write, chunk)
        completed = True
    finally:
        await asyncio.to_thread(out.close)
        if not completed:
            await asyncio.to_thread(dest.unlink, missing_ok=True)
    return size


@router.post("/upload-audio")
async def upload_audio(
    request: Request,
    file: UploadFile | None = File(default=None, description="音频文件"),
    caption: str | None = Form(default=None, description="转发到 Telegram 时的说明文字"),
    relay: bool = Form(default=False, description="是否同时上传到 Telegram"),
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    if file is None or not file.filename:
        raise InputValidationError("file", "file required")

    upload_dir: Path = request.app.state.upload_dir
    await asyncio.to_thread(upload_dir.mkdir, parents=True, exist_ok=True)
    name = _stored_name(file.filename)
    dest = upload_dir / name

    size = await _save_upload(file, dest, MAX_UPLOAD_BYTES)
    if size is None:
        log.warning("upload_rejected_too_large", filename=file.filename, limit=MAX_UPLOAD_BYTES)
        return error_response(
            413,
            "PAYLOAD_TOO_LARGE",
            f"file exceeds {MAX_UPLOAD_BYTES} bytes",
            field="file",
        )

    audio_url = f"{UPLOAD_URL_PREFIX}/{name}"
    log.info("audio_uploaded", audio_url=audio_url, size=size, relay=relay)

    telegram = None
    if relay:
        telegram = await gateway.upload_local_file(
            dest,
            caption=escape_html(caption) if caption else None,
        )

    return {
        "ok": True,
        "audio_url": audio_url,
        "telegram_file_id": telegram.remote_token if telegram else None,
        "telegram_file_url": telegram.file_url if telegram else None,
        "telegram": telegram.model_dump(mode="json") if telegram else None,
    }
