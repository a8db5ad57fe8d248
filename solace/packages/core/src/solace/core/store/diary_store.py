"""DiaryStore SQLite 实现

日记创建后只可删除（单条或全部清空）。
"""

import asyncio
from datetime import datetime

import aiosqlite

from ..config import DIARY_DEFAULT_LIMIT, DIARY_MAX_LIMIT, DIARY_MIN_LIMIT
from ..exceptions import RecordConflictError
from ..models.diary import DiaryNote
from ..models.enums import RecordKind
from ..models.media import MediaReference

_COLUMNS = "note_id, username, title, body, audio_url, telegram_file_id, created_at"


def clamp_diary_limit(raw: str | int | None) -> int:
    """将查询参数 limit 钳制到 [1, 100]

    缺失或无法解析为整数时使用默认值 20。
    """
    if raw is None or raw == "":
        return DIARY_DEFAULT_LIMIT
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DIARY_DEFAULT_LIMIT
    return min(DIARY_MAX_LIMIT, max(DIARY_MIN_LIMIT, limit))


class SqliteDiaryStore:
    """DiaryStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        self._conn = conn
        self._write_lock = write_lock or asyncio.Lock()

    async def create(self, note: DiaryNote) -> None:
        """创建日记

        Raises:
            RecordConflictError: note_id 已存在
        """
        media = note.media
        async with self._write_lock:
            try:
                await self._conn.execute(
                    f"INSERT INTO diary_notes ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        note.note_id,
                        note.username,
                        note.title,
                        note.body,
                        media.audio_url if media else None,
                        media.telegram_file_id if media else None,
                        note.created_at.isoformat(),
                    ),
                )
                await self._conn.commit()
            except aiosqlite.IntegrityError as e:
                raise RecordConflictError(RecordKind.DIARY, note.note_id) from e

    async def get(self, note_id: str) -> DiaryNote | None:
        """根据 note_id 查询"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM diary_notes WHERE note_id = ?",
            (note_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_note(row)

    async def delete(self, note_id: str) -> DiaryNote | None:
        """删除单条日记，返回被删除的记录；不存在返回 None"""
        async with self._write_lock:
            cursor = await self._conn.execute(
                f"DELETE FROM diary_notes WHERE note_id = ? RETURNING {_COLUMNS}",
                (note_id,),
            )
            row = await cursor.fetchone()
            await cursor.close()
            await self._conn.commit()
        if row is None:
            return None
        return self._row_to_note(row)

    async def delete_all(self) -> int:
        """删除全部日记，返回删除条数"""
        async with self._write_lock:
            cursor = await self._conn.execute("DELETE FROM diary_notes")
            deleted = cursor.rowcount
            await self._conn.commit()
        return max(deleted, 0)

    async def count(self) -> int:
        cursor = await self._conn.execute("SELECT COUNT(*) FROM diary_notes")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def list_notes(
        self, limit: str | int | None = DIARY_DEFAULT_LIMIT
    ) -> list[DiaryNote]:
        """按 created_at 倒序列出最近的日记，limit 钳制到 [1, 100]"""
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM diary_notes
            ORDER BY created_at DESC, note_id DESC
            LIMIT ?
            """,
            (clamp_diary_limit(limit),),
        )
        rows = await cursor.fetchall()
        return [self._row_to_note(row) for row in rows]

    @staticmethod
    def _row_to_note(row: aiosqlite.Row) -> DiaryNote:
        """将数据库行转换为 DiaryNote 模型"""
        return DiaryNote(
            note_id=row[0],
            username=row[1],
            title=row[2],
            body=row[3],
            media=MediaReference.from_fields(audio_url=row[4], telegram_file_id=row[5]),
            created_at=datetime.fromisoformat(row[6]),
        )
