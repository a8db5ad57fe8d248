"""MediaReference Domain Model

媒体附件是一个和类型：本地文件（local）或 Telegram 远端 file_id（remote_token），
每个附件恰好取其一，从不同时持有两者。
"""

from pydantic import BaseModel, Field

from .enums import MediaKind


class MediaReference(BaseModel):
    """媒体附件引用"""

    kind: MediaKind = Field(description="引用种类")
    ref: str = Field(min_length=1, description="本地相对 URL 或 Telegram file_id")

    @classmethod
    def from_fields(
        cls,
        audio_url: str | None = None,
        telegram_file_id: str | None = None,
    ) -> "MediaReference | None":
        """由接口字段对 (audio_url, telegram_file_id) 构建引用

        两者同时提供时以远端 file_id 为准（无需再次上传）。
        均为空时返回 None。
        """
        if telegram_file_id and telegram_file_id.strip():
            return cls(kind=MediaKind.REMOTE_TOKEN, ref=telegram_file_id.strip())
        if audio_url and audio_url.strip():
            return cls(kind=MediaKind.LOCAL, ref=audio_url.strip())
        return None

    @property
    def audio_url(self) -> str | None:
        return self.ref if self.kind == MediaKind.LOCAL else None

    @property
    def telegram_file_id(self) -> str | None:
        return self.ref if self.kind == MediaKind.REMOTE_TOKEN else None
