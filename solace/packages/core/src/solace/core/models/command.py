"""InboundCommand -- 入站聊天指令的解析结果

瞬态值，不落库。携带发送者标识与原始文本。
"""

from pydantic import BaseModel, Field

from .enums import CommandKind


class InboundCommand(BaseModel):
    """解析后的入站指令"""

    kind: CommandKind = Field(description="指令种类")
    sender_id: str | None = Field(default=None, description="发送者 chat id")
    raw_text: str = Field(default="", description="原始文本（或 caption）")
    target_id: str | None = Field(
        default=None,
        description="目标记录标识（delete_diary / record_reply）",
    )
    reply_text: str | None = Field(default=None, description="回复正文（record_reply）")
