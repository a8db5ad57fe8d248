"""Solace Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .command import InboundCommand
from .diary import DiaryNote
from .enums import CommandKind, MediaKind, RecordKind
from .grievance import Grievance
from .media import MediaReference
from .mood import Mood

__all__ = [
    # 枚举
    "RecordKind",
    "MediaKind",
    "CommandKind",
    # 记录
    "Grievance",
    "Mood",
    "DiaryNote",
    "MediaReference",
    # 指令
    "InboundCommand",
]
