"""共享连接上的并发写入测试

测试内容：
1. 三个 Store 共用 StoreGroup 的写锁
2. 写锁被占用时写操作等待
3. 回复 / 删除 / 创建（含 RETURNING 语句）交错并发，无异常且终态正确
"""

import asyncio
from datetime import UTC, datetime, timedelta

from solace.core.models import RecordKind

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class TestWriteLock:
    def test_stores_share_group_lock(self, store_group):
        lock = store_group.write_lock
        assert store_group.grievance_store._write_lock is lock
        assert store_group.mood_store._write_lock is lock
        assert store_group.diary_store._write_lock is lock

    async def test_write_waits_for_lock(self, store_group):
        async with store_group.write_lock:
            task = asyncio.create_task(store_group.mood_store.create("bittu", 5, BASE_TIME))
            await asyncio.sleep(0.01)
            assert not task.done()

        mood = await task
        assert mood.value == 5


class TestInterleavedWrites:
    async def test_mixed_writes_do_not_interfere(self, store_group, make_grievance, make_note):
        grievances = [make_grievance(text=f"g{i}", offset_s=i) for i in range(20)]
        notes = [make_note(body=f"n{i}", offset_s=i) for i in range(20)]
        for grievance in grievances:
            await store_group.grievance_store.create(grievance)
        for note in notes:
            await store_group.diary_store.create(note)

        replied_at = BASE_TIME + timedelta(hours=1)
        jobs = [
            *(
                store_group.grievance_store.update_reply(
                    g.grievance_id, f"reply {g.text}", replied_at
                )
                for g in grievances
            ),
            *(store_group.diary_store.delete(n.note_id) for n in notes[:10]),
            *(store_group.mood_store.create("bittu", i % 11, BASE_TIME) for i in range(30)),
            *(
                store_group.grievance_store.create(make_grievance(text=f"new{i}"))
                for i in range(10)
            ),
        ]

        results = await asyncio.gather(*jobs, return_exceptions=True)

        errors = [r for r in results if isinstance(r, BaseException)]
        assert errors == []

        for grievance in grievances:
            stored = await store_group.grievance_store.get(grievance.grievance_id)
            assert stored.reply == f"reply {grievance.text}"
            assert stored.replied_at == replied_at
        for note in notes[:10]:
            assert await store_group.diary_store.get(note.note_id) is None
        for note in notes[10:]:
            assert await store_group.diary_store.get(note.note_id) is not None

        assert await store_group.count(RecordKind.GRIEVANCE) == 30
        assert await store_group.count(RecordKind.MOOD) == 30
        assert await store_group.count(RecordKind.DIARY) == 10

        mood_ids = {r.mood_id for r in results[30:60]}
        assert len(mood_ids) == 30
