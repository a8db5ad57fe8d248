"""Mood Domain Model -- 创建后不可变"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import MOOD_MAX_VALUE, MOOD_MIN_VALUE


class Mood(BaseModel):
    """Mood 数据模型"""

    mood_id: int = Field(description="存储层分配的自增序号")
    username: str = Field(min_length=1, description="提交者名称")
    value: int = Field(ge=MOOD_MIN_VALUE, le=MOOD_MAX_VALUE, description="心情评分 0-10")
    created_at: datetime = Field(description="创建时间")
