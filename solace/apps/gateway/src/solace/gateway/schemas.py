"""HTTP 请求体与响应视图

响应视图把领域模型的 MediaReference 展开为 audio_url / telegram_file_id 两个字段，
两者至多一个非空。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from solace.core.models import DiaryNote, Grievance, Mood

# ---- 请求体（必填项由 SubmissionService 校验，以便统一返回 VALIDATION_ERROR） ----


class GrievanceRequest(BaseModel):
    username: str | None = Field(default=None, description="提交者名称")
    text: str | None = Field(default=None, description="正文")
    audio_url: str | None = Field(default=None, description="本地上传音频 URL")
    telegram_file_id: str | None = Field(default=None, description="Telegram 已有文件 file_id")


class ReplyRequest(BaseModel):
    reply: str | None = Field(default=None, description="回复正文")


class MoodRequest(BaseModel):
    username: str | None = Field(default=None, description="提交者名称")
    value: Any = Field(default=None, description="心情评分 0-10（整数、整数值浮点或数字字符串）")


class DiaryRequest(BaseModel):
    username: str | None = Field(default=None, description="作者名称")
    title: str | None = Field(default=None, description="标题")
    body: str | None = Field(default=None, description="正文")
    audio_url: str | None = Field(default=None, description="本地上传音频 URL")
    telegram_file_id: str | None = Field(default=None, description="Telegram 已有文件 file_id")


class NotifyRequest(BaseModel):
    username: str | None = Field(default=None, description="登录用户名")


# ---- 响应视图 ----


class GrievanceView(BaseModel):
    id: str
    username: str
    text: str
    reply: str | None = None
    audio_url: str | None = None
    telegram_file_id: str | None = None
    created_at: datetime
    replied_at: datetime | None = None

    @classmethod
    def from_record(cls, grievance: Grievance) -> "GrievanceView":
        media = grievance.media
        return cls(
            id=grievance.grievance_id,
            username=grievance.username,
            text=grievance.text,
            reply=grievance.reply,
            audio_url=media.audio_url if media else None,
            telegram_file_id=media.telegram_file_id if media else None,
            created_at=grievance.created_at,
            replied_at=grievance.replied_at,
        )


class MoodView(BaseModel):
    id: int
    username: str
    value: int
    created_at: datetime

    @classmethod
    def from_record(cls, mood: Mood) -> "MoodView":
        return cls(
            id=mood.mood_id,
            username=mood.username,
            value=mood.value,
            created_at=mood.created_at,
        )


class DiaryView(BaseModel):
    id: str
    username: str | None = None
    title: str | None = None
    body: str
    audio_url: str | None = None
    telegram_file_id: str | None = None
    created_at: datetime

    @classmethod
    def from_record(cls, note: DiaryNote) -> "DiaryView":
        media = note.media
        return cls(
            id=note.note_id,
            username=note.username,
            title=note.title,
            body=note.body,
            audio_url=media.audio_url if media else None,
            telegram_file_id=media.telegram_file_id if media else None,
            created_at=note.created_at,
        )
