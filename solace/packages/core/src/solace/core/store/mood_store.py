"""MoodStore SQLite 实现

moods 记录创建后不可变，序号由 SQLite 自增分配。
"""

import asyncio
from datetime import datetime

import aiosqlite

from ..models.mood import Mood

_COLUMNS = "mood_id, username, value, created_at"


class SqliteMoodStore:
    """MoodStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        self._conn = conn
        self._write_lock = write_lock or asyncio.Lock()

    async def create(self, username: str, value: int, created_at: datetime) -> Mood:
        """创建心情记录，返回带序号的完整记录"""
        async with self._write_lock:
            cursor = await self._conn.execute(
                f"""
                INSERT INTO moods (username, value, created_at)
                VALUES (?, ?, ?)
                RETURNING {_COLUMNS}
                """,
                (username, value, created_at.isoformat()),
            )
            row = await cursor.fetchone()
            await cursor.close()
            await self._conn.commit()
        return self._row_to_mood(row)

    async def get(self, mood_id: int) -> Mood | None:
        """根据 mood_id 查询"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM moods WHERE mood_id = ?",
            (mood_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_mood(row)

    async def latest_for_user(self, username: str) -> Mood | None:
        """查询指定用户最新一条心情"""
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM moods
            WHERE username = ?
            ORDER BY created_at DESC, mood_id DESC
            LIMIT 1
            """,
            (username,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_mood(row)

    async def delete_all(self) -> int:
        """删除全部心情记录，返回删除条数"""
        async with self._write_lock:
            cursor = await self._conn.execute("DELETE FROM moods")
            deleted = cursor.rowcount
            await self._conn.commit()
        return max(deleted, 0)

    async def count(self) -> int:
        cursor = await self._conn.execute("SELECT COUNT(*) FROM moods")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def list_moods(self, limit: int) -> list[Mood]:
        """按 created_at 倒序列出最近 limit 条"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM moods ORDER BY created_at DESC, mood_id DESC LIMIT ?",
            (limit,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_mood(row) for row in rows]

    @staticmethod
    def _row_to_mood(row: aiosqlite.Row) -> Mood:
        """将数据库行转换为 Mood 模型"""
        return Mood(
            mood_id=row[0],
            username=row[1],
            value=row[2],
            created_at=datetime.fromisoformat(row[3]),
        )
