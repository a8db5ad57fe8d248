"""packages/core 测试配置 -- 核心层 fixture"""

from datetime import UTC, datetime, timedelta

import pytest
from solace.core.models import DiaryNote, Grievance, MediaReference
from ulid import ULID

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_grievance():
    """构造 Grievance 的工厂（offset_s 控制 created_at 先后）"""

    def _make(
        username: str = "bittu",
        text: str = "the wifi is down again",
        offset_s: int = 0,
        media: MediaReference | None = None,
    ) -> Grievance:
        return Grievance(
            grievance_id=str(ULID()),
            username=username,
            text=text,
            media=media,
            created_at=BASE_TIME + timedelta(seconds=offset_s),
        )

    return _make


@pytest.fixture
def make_note():
    """构造 DiaryNote 的工厂"""

    def _make(
        body: str = "today was fine",
        title: str | None = None,
        offset_s: int = 0,
        media: MediaReference | None = None,
    ) -> DiaryNote:
        return DiaryNote(
            note_id=str(ULID()),
            username="bittu",
            title=title,
            body=body,
            media=media,
            created_at=BASE_TIME + timedelta(seconds=offset_s),
        )

    return _make
