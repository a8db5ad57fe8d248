"""Store Protocol 接口定义

定义 GrievanceStore、MoodStore、DiaryStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from datetime import datetime
from typing import Protocol

from ..models.diary import DiaryNote
from ..models.grievance import Grievance
from ..models.mood import Mood


class GrievanceStore(Protocol):
    """Grievance 存储接口"""

    async def create(self, grievance: Grievance) -> None:
        """创建记录，标识重复时抛出 RecordConflictError"""
        ...

    async def get(self, grievance_id: str) -> Grievance | None:
        """根据标识查询"""
        ...

    async def update_reply(
        self,
        grievance_id: str,
        reply: str,
        replied_at: datetime,
    ) -> Grievance | None:
        """单条件写入回复及回复时间，记录不存在返回 None"""
        ...

    async def delete_all(self) -> int:
        """删除全部记录，返回删除条数"""
        ...

    async def list_grievances(self) -> list[Grievance]:
        """按创建时间正序（最早在前）列出"""
        ...


class MoodStore(Protocol):
    """Mood 存储接口（记录不可变）"""

    async def create(self, username: str, value: int, created_at: datetime) -> Mood:
        """创建记录，由存储层分配自增序号"""
        ...

    async def get(self, mood_id: int) -> Mood | None:
        """根据序号查询"""
        ...

    async def latest_for_user(self, username: str) -> Mood | None:
        """查询指定用户最新一条心情"""
        ...

    async def delete_all(self) -> int:
        """删除全部记录，返回删除条数"""
        ...

    async def list_moods(self, limit: int) -> list[Mood]:
        """按创建时间倒序列出"""
        ...


class DiaryStore(Protocol):
    """DiaryNote 存储接口"""

    async def create(self, note: DiaryNote) -> None:
        """创建记录，标识重复时抛出 RecordConflictError"""
        ...

    async def get(self, note_id: str) -> DiaryNote | None:
        """根据标识查询"""
        ...

    async def delete(self, note_id: str) -> DiaryNote | None:
        """删除单条，返回被删除的记录；不存在返回 None"""
        ...

    async def delete_all(self) -> int:
        """删除全部记录，返回删除条数"""
        ...

    async def list_notes(self, limit: int) -> list[DiaryNote]:
        """按创建时间倒序列出，limit 由调用方钳制到 [1, 100]"""
        ...
