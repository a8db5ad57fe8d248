"""SubmissionService -- 提交校验、落库与通知

每个创建操作的流程：
1. 校验输入（失败抛 InputValidationError，不产生任何副作用）
2. 分配标识与时间戳并写入 Record Store
3. 按投递决策表发送一次通知（通知失败不影响已落库的记录）
"""

import math
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import BaseModel, Field
from solace.channel import escape_html
from solace.core.config import MOOD_MAX_VALUE, MOOD_MIN_VALUE, MOODS_LIST_LIMIT
from solace.core.exceptions import InputValidationError, RecordNotFoundError
from solace.core.models import DiaryNote, Grievance, MediaReference, Mood, RecordKind
from solace.core.store import StoreGroup
from ulid import ULID

from .delivery import DeliveryOutcome, DeliveryService

log = structlog.get_logger()


class SubmissionResult(BaseModel):
    """提交结果：已落库的记录与通知投递结果"""

    record: Grievance | Mood | DiaryNote | None = Field(default=None, description="新记录")
    notification: DeliveryOutcome = Field(description="通知投递结果")


def _format_time(dt: datetime) -> str:
    return dt.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


def _require_text(field: str, value: Any) -> str:
    """必填文本字段：非字符串或去除空白后为空均视为缺失"""
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(field, f"{field} required")
    return value


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InputValidationError("title", "must be a string")
    return value.strip() or None


def parse_mood_value(value: Any) -> int:
    """校验心情评分

    接受整数、整数值浮点数与数字字符串，范围 [0, 10]；
    布尔值、非数字与小数一律拒绝。
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InputValidationError("value", "value required")
    # bool 是 int 的子类，须先排除
    if isinstance(value, bool):
        raise InputValidationError("value", "value must be a number")

    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise InputValidationError("value", "value must be a number") from None
    else:
        raise InputValidationError("value", "value must be a number")

    if isinstance(number, float):
        if not math.isfinite(number):
            raise InputValidationError("value", "value must be a number")
        if not number.is_integer():
            raise InputValidationError("value", "value must be a whole number")
        number = int(number)

    if not MOOD_MIN_VALUE <= number <= MOOD_MAX_VALUE:
        raise InputValidationError(
            "value", f"value must be {MOOD_MIN_VALUE}-{MOOD_MAX_VALUE}"
        )
    return number


def grievance_notice(grievance: Grievance) -> str:
    gid = escape_html(grievance.grievance_id)
    return (
        f"📢 New grievance from {escape_html(grievance.username)}:\n\n"
        f"{escape_html(grievance.text)}\n\n"
        f"ID: {gid}\n\n"
        f"Reply using:\nreply {gid} &lt;your message&gt;"
    )


def mood_notice(mood: Mood) -> str:
    return (
        f"📊 Mood update from {escape_html(mood.username)}: {mood.value}/10\n\n"
        f"At: {escape_html(_format_time(mood.created_at))}\n"
        f"ID: {mood.mood_id}"
    )


def diary_notice(note: DiaryNote) -> str:
    lines = [
        "<b>📔 Diary</b>",
        f"<b>{escape_html(note.title or 'Untitled')}</b>",
        f"<i>{escape_html(_format_time(note.created_at))}</i>",
    ]
    if note.username:
        lines.append(f"by {escape_html(note.username)}")
    return "\n".join(lines) + f"\n\n{escape_html(note.body)}"


def login_notice(username: str, at: datetime) -> str:
    return f"✅ Login: {escape_html(username)} ({escape_html(_format_time(at))})"


class SubmissionService:
    """提交业务服务"""

    def __init__(self, store_group: StoreGroup, delivery: DeliveryService) -> None:
        self._stores = store_group
        self._delivery = delivery

    async def create_grievance(
        self,
        username: Any,
        text: Any,
        audio_url: str | None = None,
        telegram_file_id: str | None = None,
    ) -> SubmissionResult:
        """创建吐槽并通知广播目标"""
        username = _require_text("username", username).strip()
        text = _require_text("text", text)

        grievance = Grievance(
            grievance_id=str(ULID()),
            username=username,
            text=text,
            media=MediaReference.from_fields(audio_url, telegram_file_id),
            created_at=datetime.now(UTC),
        )
        await self._stores.grievance_store.create(grievance)
        log.info(
            "grievance_created",
            grievance_id=grievance.grievance_id,
            has_media=grievance.media is not None,
        )

        outcome = await self._delivery.deliver(grievance_notice(grievance), grievance.media)
        return SubmissionResult(record=grievance, notification=outcome)

    async def reply_grievance(self, grievance_id: str, reply: Any) -> Grievance:
        """记录（或覆盖）管理员回复

        Raises:
            InputValidationError: reply 为空
            RecordNotFoundError: 吐槽不存在
        """
        reply = _require_text("reply", reply).strip()
        updated = await self._stores.grievance_store.update_reply(
            grievance_id, reply, datetime.now(UTC)
        )
        if updated is None:
            raise RecordNotFoundError(RecordKind.GRIEVANCE, grievance_id)
        log.info("grievance_replied", grievance_id=grievance_id)
        return updated

    async def create_mood(self, username: Any, value: Any) -> SubmissionResult:
        """记录心情评分并通知广播目标"""
        username = _require_text("username", username).strip()
        score = parse_mood_value(value)

        mood = await self._stores.mood_store.create(username, score, datetime.now(UTC))
        log.info("mood_created", mood_id=mood.mood_id, value=mood.value)

        outcome = await self._delivery.deliver(mood_notice(mood))
        return SubmissionResult(record=mood, notification=outcome)

    async def create_diary(
        self,
        body: Any,
        username: Any = None,
        title: Any = None,
        audio_url: str | None = None,
        telegram_file_id: str | None = None,
    ) -> SubmissionResult:
        """创建日记并转发到广播目标"""
        body = _require_text("body", body)
        if username is not None and not isinstance(username, str):
            raise InputValidationError("username", "must be a string")

        note = DiaryNote(
            note_id=str(ULID()),
            username=(username or "").strip() or None,
            title=_optional_text(title),
            body=body,
            media=MediaReference.from_fields(audio_url, telegram_file_id),
            created_at=datetime.now(UTC),
        )
        await self._stores.diary_store.create(note)
        log.info("diary_note_created", note_id=note.note_id, has_media=note.media is not None)

        outcome = await self._delivery.deliver(diary_notice(note), note.media)
        return SubmissionResult(record=note, notification=outcome)

    async def delete_diary(self, note_id: str) -> DiaryNote:
        """删除日记

        Raises:
            RecordNotFoundError: 日记不存在
        """
        deleted = await self._stores.diary_store.delete(note_id)
        if deleted is None:
            raise RecordNotFoundError(RecordKind.DIARY, note_id)
        log.info("diary_note_deleted", note_id=note_id)
        return deleted

    async def notify_login(self, username: Any) -> SubmissionResult:
        """登录通知，不落库"""
        username = _require_text("username", username).strip()
        outcome = await self._delivery.deliver(login_notice(username, datetime.now(UTC)))
        return SubmissionResult(notification=outcome)

    # ---- 查询 ----

    async def list_grievances(self) -> list[Grievance]:
        return await self._stores.grievance_store.list_grievances()

    async def list_moods(self) -> list[Mood]:
        return await self._stores.mood_store.list_moods(MOODS_LIST_LIMIT)

    async def latest_mood(self, username: Any) -> Mood | None:
        username = _require_text("username", username).strip()
        return await self._stores.mood_store.latest_for_user(username)

    async def list_diary(self, limit: str | int | None = None) -> list[DiaryNote]:
        return await self._stores.diary_store.list_notes(limit)
