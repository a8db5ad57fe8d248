"""Solace Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from ..models.enums import RecordKind
from .bulk import ClearReport, clear_all_records
from .diary_store import SqliteDiaryStore, clamp_diary_limit
from .grievance_store import SqliteGrievanceStore
from .mood_store import SqliteMoodStore
from .sqlite_init import init_db


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接

    三个 Store 共用一把写锁：同一连接上一条写语句从执行、取回 RETURNING 行到提交
    必须连续完成，中间不能插入其他协程的提交。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.write_lock = asyncio.Lock()
        self.grievance_store = SqliteGrievanceStore(conn, self.write_lock)
        self.mood_store = SqliteMoodStore(conn, self.write_lock)
        self.diary_store = SqliteDiaryStore(conn, self.write_lock)

    def _store_for(self, kind: RecordKind):
        return {
            RecordKind.GRIEVANCE: self.grievance_store,
            RecordKind.MOOD: self.mood_store,
            RecordKind.DIARY: self.diary_store,
        }[kind]

    async def delete_all(self, kind: RecordKind) -> int:
        """删除指定种类的全部记录，返回删除条数"""
        return await self._store_for(kind).delete_all()

    async def count(self, kind: RecordKind) -> int:
        """统计指定种类的记录条数"""
        return await self._store_for(kind).count()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例

    Raises:
        aiosqlite.Error / OSError: 数据库不可用（调用方应终止启动）
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    try:
        await init_db(conn)
    except Exception:
        await conn.close()
        raise

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteGrievanceStore",
    "SqliteMoodStore",
    "SqliteDiaryStore",
    "clamp_diary_limit",
    "init_db",
    "ClearReport",
    "clear_all_records",
]
