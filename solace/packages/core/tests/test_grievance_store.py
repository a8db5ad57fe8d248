"""GrievanceStore 单元测试

测试内容：
1. 创建 / 查询 / 媒体列往返
2. 回复写入与覆盖（reply 与 replied_at 同时落盘）
3. 不存在的记录返回 None
4. 重复标识抛 RecordConflictError
5. 列表按创建顺序（最早在前）
"""

from datetime import UTC, datetime, timedelta

import aiosqlite
import pytest
from solace.core.exceptions import RecordConflictError
from solace.core.models import MediaReference
from solace.core.store import SqliteGrievanceStore


@pytest.fixture
def store(db_conn: aiosqlite.Connection) -> SqliteGrievanceStore:
    return SqliteGrievanceStore(db_conn)


class TestGrievanceStore:
    async def test_create_and_get(self, store, make_grievance):
        grievance = make_grievance(
            media=MediaReference.from_fields(telegram_file_id="tg-1"),
        )
        await store.create(grievance)

        loaded = await store.get(grievance.grievance_id)
        assert loaded == grievance
        assert loaded.media.telegram_file_id == "tg-1"

    async def test_get_missing_returns_none(self, store):
        assert await store.get("does-not-exist") is None

    async def test_duplicate_id_raises_conflict(self, store, make_grievance):
        grievance = make_grievance()
        await store.create(grievance)
        with pytest.raises(RecordConflictError):
            await store.create(grievance)
        assert await store.count() == 1

    async def test_update_reply_sets_both_fields(self, store, make_grievance):
        grievance = make_grievance()
        await store.create(grievance)
        replied_at = datetime.now(UTC)

        updated = await store.update_reply(grievance.grievance_id, "on it", replied_at)

        assert updated.reply == "on it"
        assert updated.replied_at == replied_at
        assert (await store.get(grievance.grievance_id)).reply == "on it"

    async def test_reply_overwrites_previous(self, store, make_grievance):
        """第二次回复覆盖第一次"""
        grievance = make_grievance()
        await store.create(grievance)
        first = datetime.now(UTC)
        await store.update_reply(grievance.grievance_id, "first", first)

        updated = await store.update_reply(
            grievance.grievance_id, "second", first + timedelta(minutes=1)
        )
        assert updated.reply == "second"
        assert updated.replied_at == first + timedelta(minutes=1)

    async def test_update_reply_missing_returns_none(self, store):
        assert await store.update_reply("nope", "hi", datetime.now(UTC)) is None

    async def test_list_oldest_first(self, store, make_grievance):
        later = make_grievance(text="later", offset_s=60)
        earlier = make_grievance(text="earlier", offset_s=0)
        await store.create(later)
        await store.create(earlier)

        listed = await store.list_grievances()
        assert [g.text for g in listed] == ["earlier", "later"]

    async def test_delete_all_returns_count(self, store, make_grievance):
        for i in range(3):
            await store.create(make_grievance(offset_s=i))
        assert await store.delete_all() == 3
        assert await store.count() == 0
        assert await store.delete_all() == 0
