"""枚举定义

包含记录种类 RecordKind、媒体引用种类 MediaKind、入站指令种类 CommandKind。
"""

from enum import StrEnum


class RecordKind(StrEnum):
    """记录种类 -- Record Store 按种类分表存储"""

    GRIEVANCE = "grievance"
    MOOD = "mood"
    DIARY = "diary"


class MediaKind(StrEnum):
    """媒体引用种类

    LOCAL: 服务端本地上传目录中的文件（相对 URL）
    REMOTE_TOKEN: Telegram 已持有文件的 file_id
    """

    LOCAL = "local"
    REMOTE_TOKEN = "remote_token"


class CommandKind(StrEnum):
    """入站指令种类（按匹配优先级排列）"""

    CLEAR_REQUEST = "clear_request"
    CLEAR_CONFIRM = "clear_confirm"
    DELETE_DIARY = "delete_diary"
    RECORD_REPLY = "record_reply"
    UNRECOGNIZED = "unrecognized"
