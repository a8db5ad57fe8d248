"""CLI 入口模块 -- python -m solace.core <command>

支持的命令：
  stats            输出三类记录的条数
  clear-all --yes  清空全部吐槽、心情与日记（不可恢复）
"""

import asyncio
import sys

from .config import get_db_path
from .models.enums import RecordKind

_USAGE = """用法: python -m solace.core <command>
命令:
  stats            输出三类记录的条数
  clear-all --yes  清空全部吐槽、心情与日记（不可恢复）"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "stats":
        asyncio.run(show_stats())
    elif command == "clear-all":
        if "--yes" not in sys.argv[2:]:
            print("clear-all 不可恢复，请追加 --yes 确认")
            sys.exit(1)
        ok = asyncio.run(clear_all())
        if not ok:
            sys.exit(2)
    else:
        print(f"未知命令: {command}")
        print("可用命令: stats, clear-all")
        sys.exit(1)


async def show_stats() -> None:
    """输出各类记录条数"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        for kind in RecordKind:
            print(f"  {kind.value}: {await store_group.count(kind)}")
    finally:
        await store_group.conn.close()


async def clear_all() -> bool:
    """执行批量清空，返回是否全部成功"""
    from .store import clear_all_records, create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        report = await clear_all_records(store_group)
    finally:
        await store_group.conn.close()

    print(
        f"已删除 {report.grievances} 条吐槽、{report.moods} 条心情、"
        f"{report.diary_notes} 条日记"
    )
    if not report.ok:
        print(f"清空在 {report.failed_kind} 处失败: {report.error}")
    return report.ok


if __name__ == "__main__":
    main()
