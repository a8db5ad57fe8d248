"""日记路由

GET    /diary?limit=:   最近的日记（最新在前），limit 钳制到 [1, 100]，默认 20
POST   /diary:          创建日记并转发到广播目标
DELETE /diary/{id}:     删除单条日记；不存在返回 404
"""

from fastapi import APIRouter, Depends, Query

from ..deps import get_submission_service
from ..schemas import DiaryRequest, DiaryView
from ..services.submission_service import SubmissionService

router = APIRouter()


@router.get("/diary")
async def list_diary(
    limit: str | None = Query(default=None, description="返回条数，非法值按默认 20 处理"),
    service: SubmissionService = Depends(get_submission_service),
):
    notes = await service.list_diary(limit)
    return [DiaryView.from_record(n).model_dump(mode="json") for n in notes]


@router.post("/diary")
async def create_diary(
    body: DiaryRequest,
    service: SubmissionService = Depends(get_submission_service),
):
    result = await service.create_diary(
        body.body,
        username=body.username,
        title=body.title,
        audio_url=body.audio_url,
        telegram_file_id=body.telegram_file_id,
    )
    return {
        "ok": True,
        "note": DiaryView.from_record(result.record).model_dump(mode="json"),
        "telegram": result.notification.model_dump(mode="json"),
    }


@router.delete("/diary/{note_id}")
async def delete_diary(
    note_id: str,
    service: SubmissionService = Depends(get_submission_service),
):
    deleted = await service.delete_diary(note_id)
    return {"ok": True, "deleted": DiaryView.from_record(deleted).model_dump(mode="json")}
