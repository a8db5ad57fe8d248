"""DiaryNote Domain Model

公开可列出的日记条目，创建后只可删除。
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .media import MediaReference


class DiaryNote(BaseModel):
    """DiaryNote 数据模型"""

    note_id: str = Field(description="唯一标识，ULID 格式")
    username: str | None = Field(default=None, description="作者名称（可选）")
    title: str | None = Field(default=None, description="标题（可选）")
    body: str = Field(description="正文，去除首尾空白后不可为空")
    media: MediaReference | None = Field(default=None, description="音频附件")
    created_at: datetime = Field(description="创建时间")

    @field_validator("body")
    @classmethod
    def _body_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("body must not be blank")
        return v
