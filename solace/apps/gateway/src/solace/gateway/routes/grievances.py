"""吐槽路由

GET  /grievances:              按创建顺序（最早在前）列出全部吐槽
POST /grievances:              创建吐槽并通知广播目标
POST /grievances/{id}/reply:   记录（或覆盖）回复；不存在返回 404
"""

from fastapi import APIRouter, Depends

from ..deps import get_submission_service
from ..schemas import GrievanceRequest, GrievanceView, ReplyRequest
from ..services.submission_service import SubmissionService

router = APIRouter()


@router.get("/grievances")
async def list_grievances(service: SubmissionService = Depends(get_submission_service)):
    grievances = await service.list_grievances()
    return [GrievanceView.from_record(g).model_dump(mode="json") for g in grievances]


@router.post("/grievances")
async def create_grievance(
    body: GrievanceRequest,
    service: SubmissionService = Depends(get_submission_service),
):
    """创建吐槽

    记录写入成功即返回 ok=true；通知结果单独放在 telegram 字段。
    """
    result = await service.create_grievance(
        body.username,
        body.text,
        audio_url=body.audio_url,
        telegram_file_id=body.telegram_file_id,
    )
    return {
        "ok": True,
        "grievance": GrievanceView.from_record(result.record).model_dump(mode="json"),
        "telegram": result.notification.model_dump(mode="json"),
    }


@router.post("/grievances/{grievance_id}/reply")
async def reply_grievance(
    grievance_id: str,
    body: ReplyRequest,
    service: SubmissionService = Depends(get_submission_service),
):
    grievance = await service.reply_grievance(grievance_id, body.reply)
    return {
        "ok": True,
        "grievance": GrievanceView.from_record(grievance).model_dump(mode="json"),
    }
