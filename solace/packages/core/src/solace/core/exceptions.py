"""Core 异常体系

InputValidationError -> HTTP 400
RecordNotFoundError  -> HTTP 404
RecordConflictError  -> HTTP 409（ULID 保证下不应出现，但必须可处理）
底层存储失败直接以 aiosqlite.Error 上抛，由 gateway 统一映射为 500。
"""

from .models.enums import RecordKind


class SolaceError(Exception):
    """Solace 基础异常"""


class InputValidationError(SolaceError):
    """输入校验失败（缺失字段或取值越界）"""

    def __init__(self, field: str, message: str) -> None:
        """
        Args:
            field: 出错的字段名
            message: 面向调用方的错误描述
        """
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class RecordNotFoundError(SolaceError):
    """按标识查询的记录不存在"""

    def __init__(self, kind: RecordKind, key: str | int) -> None:
        super().__init__(f"{kind.value} with id {key} does not exist")
        self.kind = kind
        self.key = key


class RecordConflictError(SolaceError):
    """创建记录时标识已存在"""

    def __init__(self, kind: RecordKind, key: str | int) -> None:
        super().__init__(f"{kind.value} with id {key} already exists")
        self.kind = kind
        self.key = key
