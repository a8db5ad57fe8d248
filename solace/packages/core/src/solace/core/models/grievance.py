"""Grievance Domain Model

用户提交的吐槽记录，可由管理员回复（回复可覆盖）。
reply 与 replied_at 必须同时为空或同时非空。
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from .media import MediaReference


class Grievance(BaseModel):
    """Grievance 数据模型"""

    grievance_id: str = Field(description="唯一标识，ULID 格式（兼作插入顺序）")
    username: str = Field(min_length=1, description="提交者名称")
    text: str = Field(min_length=1, description="正文")
    reply: str | None = Field(default=None, description="管理员回复")
    media: MediaReference | None = Field(default=None, description="音频附件")
    created_at: datetime = Field(description="创建时间")
    replied_at: datetime | None = Field(default=None, description="回复时间")

    @model_validator(mode="after")
    def _reply_pairing(self) -> "Grievance":
        if (self.reply is None) != (self.replied_at is None):
            raise ValueError("reply and replied_at must be set together")
        return self
