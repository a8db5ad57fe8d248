"""跨记录种类的批量清空

依次对 grievances、moods、diary_notes 调用 delete_all。
三次删除相互独立、不在同一事务内：中途失败时已完成的删除不回滚，
报告中保留失败前已达到的计数并记录错误。
"""

import structlog
from pydantic import BaseModel, Field

from ..models.enums import RecordKind

log = structlog.get_logger()

# 清空顺序
CLEAR_ORDER: tuple[RecordKind, ...] = (
    RecordKind.GRIEVANCE,
    RecordKind.MOOD,
    RecordKind.DIARY,
)


class ClearReport(BaseModel):
    """批量清空结果"""

    grievances: int = Field(default=0, ge=0, description="已删除吐槽条数")
    moods: int = Field(default=0, ge=0, description="已删除心情条数")
    diary_notes: int = Field(default=0, ge=0, description="已删除日记条数")
    failed_kind: RecordKind | None = Field(default=None, description="失败的记录种类")
    error: str = Field(default="", description="失败原因")

    @property
    def ok(self) -> bool:
        return self.failed_kind is None


_REPORT_FIELDS: dict[RecordKind, str] = {
    RecordKind.GRIEVANCE: "grievances",
    RecordKind.MOOD: "moods",
    RecordKind.DIARY: "diary_notes",
}


async def clear_all_records(store_group) -> ClearReport:
    """清空全部三类记录

    Args:
        store_group: StoreGroup 实例

    Returns:
        ClearReport；不抛出存储异常，失败信息写入 failed_kind / error
    """
    report = ClearReport()
    for kind in CLEAR_ORDER:
        try:
            deleted = await store_group.delete_all(kind)
        except Exception as e:
            log.error(
                "bulk_clear_partial_failure",
                failed_kind=kind.value,
                error=str(e),
                error_type=type(e).__name__,
                grievances=report.grievances,
                moods=report.moods,
                diary_notes=report.diary_notes,
            )
            return report.model_copy(update={"failed_kind": kind, "error": str(e)})
        report = report.model_copy(update={_REPORT_FIELDS[kind]: deleted})

    log.info(
        "bulk_clear_completed",
        grievances=report.grievances,
        moods=report.moods,
        diary_notes=report.diary_notes,
    )
    return report
