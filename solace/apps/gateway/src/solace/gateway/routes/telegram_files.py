"""Telegram 文件路由

GET /telegram/file/{file_id}: 将 file_id 解析为限时下载 URL；无法解析返回 404。
"""

from fastapi import APIRouter, Depends
from solace.channel import NotificationGateway

from ..deps import get_notification_gateway
from ..errors import error_response

router = APIRouter()


@router.get("/telegram/file/{file_id}")
async def resolve_telegram_file(
    file_id: str,
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    url = await gateway.resolve_file_url(file_id)
    if url is None:
        return error_response(
            404,
            "TELEGRAM_FILE_NOT_FOUND",
            f"Telegram file {file_id} could not be resolved",
        )
    return {"ok": True, "url": url}
