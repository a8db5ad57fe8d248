"""心情路由

GET  /moods:                     最近 100 条（最新在前）
GET  /mood/latest?username=:     指定用户最近一条，没有则为 null
POST /mood:                      记录评分并通知广播目标
"""

from fastapi import APIRouter, Depends, Query

from ..deps import get_submission_service
from ..schemas import MoodRequest, MoodView
from ..services.submission_service import SubmissionService

router = APIRouter()


@router.get("/moods")
async def list_moods(service: SubmissionService = Depends(get_submission_service)):
    moods = await service.list_moods()
    return [MoodView.from_record(m).model_dump(mode="json") for m in moods]


@router.get("/mood/latest")
async def latest_mood(
    username: str | None = Query(default=None, description="用户名"),
    service: SubmissionService = Depends(get_submission_service),
):
    mood = await service.latest_mood(username)
    return MoodView.from_record(mood).model_dump(mode="json") if mood else None


@router.post("/mood")
async def create_mood(
    body: MoodRequest,
    service: SubmissionService = Depends(get_submission_service),
):
    result = await service.create_mood(body.username, body.value)
    return {
        "ok": True,
        "mood": MoodView.from_record(result.record).model_dump(mode="json"),
        "telegram": result.notification.model_dump(mode="json"),
    }
