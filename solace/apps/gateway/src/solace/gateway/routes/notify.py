"""登录通知路由

POST /notify: 向广播目标发送登录提醒，不落库。
"""

from fastapi import APIRouter, Depends

from ..deps import get_submission_service
from ..schemas import NotifyRequest
from ..services.submission_service import SubmissionService

router = APIRouter()


@router.post("/notify")
async def notify_login(
    body: NotifyRequest,
    service: SubmissionService = Depends(get_submission_service),
):
    result = await service.notify_login(body.username)
    return {"ok": True, "telegram": result.notification.model_dump(mode="json")}
