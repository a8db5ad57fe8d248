"""GrievanceStore SQLite 实现

回复更新使用单条 UPDATE ... RETURNING 语句：按标识条件写入，
reply 与 replied_at 同时落盘，并发回复不同记录互不干扰。
所有写操作在 StoreGroup 共享的写锁内完成 execute -> fetch -> commit。
"""

import asyncio
from datetime import datetime

import aiosqlite

from ..exceptions import RecordConflictError
from ..models.enums import RecordKind
from ..models.grievance import Grievance
from ..models.media import MediaReference

_COLUMNS = (
    "grievance_id, username, text, reply, audio_url, telegram_file_id, "
    "created_at, replied_at"
)


class SqliteGrievanceStore:
    """GrievanceStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        self._conn = conn
        self._write_lock = write_lock or asyncio.Lock()

    async def create(self, grievance: Grievance) -> None:
        """创建记录

        Raises:
            RecordConflictError: grievance_id 已存在
        """
        media = grievance.media
        async with self._write_lock:
            try:
                await self._conn.execute(
                    f"INSERT INTO grievances ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        grievance.grievance_id,
                        grievance.username,
                        grievance.text,
                        grievance.reply,
                        media.audio_url if media else None,
                        media.telegram_file_id if media else None,
                        grievance.created_at.isoformat(),
                        grievance.replied_at.isoformat() if grievance.replied_at else None,
                    ),
                )
                await self._conn.commit()
            except aiosqlite.IntegrityError as e:
                raise RecordConflictError(
                    RecordKind.GRIEVANCE, grievance.grievance_id
                ) from e

    async def get(self, grievance_id: str) -> Grievance | None:
        """根据 grievance_id 查询"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM grievances WHERE grievance_id = ?",
            (grievance_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_grievance(row)

    async def update_reply(
        self,
        grievance_id: str,
        reply: str,
        replied_at: datetime,
    ) -> Grievance | None:
        """写入（或覆盖）回复，返回更新后的记录；记录不存在返回 None"""
        async with self._write_lock:
            cursor = await self._conn.execute(
                f"""
                UPDATE grievances
                SET reply = ?, replied_at = ?
                WHERE grievance_id = ?
                RETURNING {_COLUMNS}
                """,
                (reply, replied_at.isoformat(), grievance_id),
            )
            # RETURNING 行需在提交前取回
            row = await cursor.fetchone()
            await cursor.close()
            await self._conn.commit()
        if row is None:
            return None
        return self._row_to_grievance(row)

    async def delete_all(self) -> int:
        """删除全部吐槽记录，返回删除条数"""
        async with self._write_lock:
            cursor = await self._conn.execute("DELETE FROM grievances")
            deleted = cursor.rowcount
            await self._conn.commit()
        return max(deleted, 0)

    async def count(self) -> int:
        cursor = await self._conn.execute("SELECT COUNT(*) FROM grievances")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def list_grievances(self) -> list[Grievance]:
        """按 created_at 正序列出（对话式视图，最早在前）"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM grievances ORDER BY created_at ASC, grievance_id ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_grievance(row) for row in rows]

    @staticmethod
    def _row_to_grievance(row: aiosqlite.Row) -> Grievance:
        """将数据库行转换为 Grievance 模型"""
        return Grievance(
            grievance_id=row[0],
            username=row[1],
            text=row[2],
            reply=row[3],
            media=MediaReference.from_fields(audio_url=row[4], telegram_file_id=row[5]),
            created_at=datetime.fromisoformat(row[6]),
            replied_at=datetime.fromisoformat(row[7]) if row[7] else None,
        )
