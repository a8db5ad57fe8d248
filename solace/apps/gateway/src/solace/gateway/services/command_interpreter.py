"""CommandInterpreter -- 管理员聊天指令解析与执行

指令按优先级匹配（大小写不敏感）：
1. /clear                  -> 清空确认提示（不删除任何数据）
2. /confirm_clear          -> 依次清空 grievances、moods、diary_notes
3. delete_diary <id>       -> 删除单条日记
4. reply <id> <text>       -> 记录吐槽回复（亦接受 id <id> / id:<id> / id#<id>）
5. 其他                    -> 仅对管理员回复指令帮助

/clear、/confirm_clear、delete_diary 仅限管理员（TELEGRAM_ADMIN_ID，缺省为 TELEGRAM_CHAT_ID）。
回复文本中插值部分一律做 HTML 转义。
"""

import re
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import aiosqlite
import structlog
from solace.channel import InboundMessage, NotificationGateway, escape_html
from solace.core.models import CommandKind, InboundCommand
from solace.core.store import StoreGroup, clear_all_records

log = structlog.get_logger()

_CLEAR_REQUEST_RE = re.compile(r"^/clear\b", re.IGNORECASE)
_CLEAR_CONFIRM_RE = re.compile(r"^/confirm_clear\b", re.IGNORECASE)
_DELETE_DIARY_RE = re.compile(r"^delete_diary\s+(\S+)", re.IGNORECASE)
_REPLY_RES = (
    re.compile(r"^reply\s+(\S+)\s+(.+)", re.IGNORECASE | re.DOTALL),
    re.compile(r"^id(?:[:#]\s*|\s+)(\S+)\s+(.+)", re.IGNORECASE | re.DOTALL),
)

# 仅管理员可执行的指令
ADMIN_ONLY = frozenset(
    {CommandKind.CLEAR_REQUEST, CommandKind.CLEAR_CONFIRM, CommandKind.DELETE_DIARY}
)

HELP_TEXT = (
    "Commands:\n"
    "reply &lt;GRIEVANCE_ID&gt; &lt;message&gt;\n"
    "/clear to delete data\n"
    "/confirm_clear to confirm deletion\n\n"
    "(You can also delete a diary note by sending: delete_diary &lt;id&gt;)"
)

CLEAR_WARNING = (
    "⚠️ Are you sure you want to delete ALL grievances, moods and diary notes? "
    "If yes, reply with:\n/confirm_clear\n\nThis action is irreversible."
)

_NOT_AUTHORIZED = {
    CommandKind.CLEAR_REQUEST: "⛔ You are not authorized to clear history.",
    CommandKind.CLEAR_CONFIRM: "⛔ You are not authorized to clear history.",
    CommandKind.DELETE_DIARY: "⛔ You are not authorized to delete diary notes.",
}


def parse_command(message: InboundMessage) -> InboundCommand:
    """将入站消息解析为指令（纯函数）"""
    text = message.content
    base = {"sender_id": message.chat_id, "raw_text": text}

    if _CLEAR_REQUEST_RE.match(text):
        return InboundCommand(kind=CommandKind.CLEAR_REQUEST, **base)
    if _CLEAR_CONFIRM_RE.match(text):
        return InboundCommand(kind=CommandKind.CLEAR_CONFIRM, **base)
    if match := _DELETE_DIARY_RE.match(text):
        return InboundCommand(kind=CommandKind.DELETE_DIARY, target_id=match.group(1), **base)
    for pattern in _REPLY_RES:
        match = pattern.match(text)
        if match and match.group(2).strip():
            return InboundCommand(
                kind=CommandKind.RECORD_REPLY,
                target_id=match.group(1),
                reply_text=match.group(2).strip(),
                **base,
            )
    return InboundCommand(kind=CommandKind.UNRECOGNIZED, **base)


class CommandInterpreter:
    """指令执行器：执行指令并把结果回复给发送者"""

    def __init__(
        self,
        store_group: StoreGroup,
        gateway: NotificationGateway,
        admin_chat_id: str = "",
    ) -> None:
        self._stores = store_group
        self._gateway = gateway
        self._admin_chat_id = admin_chat_id
        self._handlers: dict[CommandKind, Callable[[InboundCommand], Awaitable[str | None]]] = {
            CommandKind.CLEAR_REQUEST: self._clear_request,
            CommandKind.CLEAR_CONFIRM: self._clear_confirm,
            CommandKind.DELETE_DIARY: self._delete_diary,
            CommandKind.RECORD_REPLY: self._record_reply,
            CommandKind.UNRECOGNIZED: self._unrecognized,
        }

    def is_admin(self, sender_id: str | None) -> bool:
        return bool(self._admin_chat_id) and sender_id == self._admin_chat_id

    async def handle(self, message: InboundMessage) -> str | None:
        """执行一条入站消息

        Returns:
            回复给发送者的文本；静默忽略时返回 None
        """
        command = parse_command(message)
        log.info(
            "command_received",
            kind=command.kind.value,
            sender_id=command.sender_id,
            update_id=message.update_id,
        )

        if command.kind in ADMIN_ONLY and not self.is_admin(command.sender_id):
            log.warning(
                "command_not_authorized",
                kind=command.kind.value,
                sender_id=command.sender_id,
            )
            reply = _NOT_AUTHORIZED[command.kind]
        else:
            reply = await self._handlers[command.kind](command)

        if reply is not None and command.sender_id:
            await self._gateway.send_to(command.sender_id, reply)
        return reply

    async def _clear_request(self, command: InboundCommand) -> str:
        return CLEAR_WARNING

    async def _clear_confirm(self, command: InboundCommand) -> str:
        report = await clear_all_records(self._stores)
        counts = (
            f"{report.grievances} grievances, {report.moods} moods "
            f"and {report.diary_notes} diary notes"
        )
        if report.ok:
            log.info("admin_cleared_data", sender_id=command.sender_id)
            return f"✅ Deleted {counts}."
        return (
            f"❌ Failed to delete {report.failed_kind.value} data: {escape_html(report.error)}\n"
            f"Deleted before the failure: {counts}."
        )

    async def _delete_diary(self, command: InboundCommand) -> str:
        note_id = escape_html(command.target_id)
        try:
            deleted = await self._stores.diary_store.delete(command.target_id)
        except aiosqlite.Error as e:
            log.error("command_delete_diary_failed", note_id=command.target_id, error=str(e))
            return f"Failed to delete diary {note_id}: {escape_html(str(e))}"
        if deleted is None:
            return f"No diary note found with ID {note_id}."
        log.info("diary_note_deleted", note_id=command.target_id, via="command")
        return f"Deleted diary note {note_id}."

    async def _record_reply(self, command: InboundCommand) -> str:
        grievance_id = escape_html(command.target_id)
        try:
            updated = await self._stores.grievance_store.update_reply(
                command.target_id, command.reply_text, datetime.now(UTC)
            )
        except aiosqlite.Error as e:
            log.error("command_record_reply_failed", grievance_id=command.target_id, error=str(e))
            return f"Failed to record reply for {grievance_id}: {escape_html(str(e))}"
        if updated is None:
            return f"No grievance found with ID {grievance_id}."
        log.info("grievance_replied", grievance_id=command.target_id, via="command")
        return f"Reply recorded for grievance ID {grievance_id}:\n\n{escape_html(updated.reply)}"

    async def _unrecognized(self, command: InboundCommand) -> str | None:
        if self.is_admin(command.sender_id):
            return HELP_TEXT
        return None
