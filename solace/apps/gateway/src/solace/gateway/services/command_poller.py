"""CommandPoller -- Telegram getUpdates 轮询

单一协作式循环：每个周期先完成，下一个周期才开始（周期自然合并，不会重叠）。
游标只在本组件内推进：
- 拉取失败（不可达、非 JSON、ok=false）时整个周期放弃，游标不变，下个周期重试
- 逐条处理时先推进游标再分发，分发失败只记录日志，不重试该条 update
"""

import asyncio
from typing import Any

import structlog
from pydantic import ValidationError
from solace.channel import ChannelError, InboundMessage, TelegramClient

from .command_interpreter import CommandInterpreter

log = structlog.get_logger()

# stop() 等待当前周期结束的最长时间（秒）
STOP_GRACE_S = 5


class CommandPoller:
    """入站指令轮询器"""

    def __init__(
        self,
        client: TelegramClient,
        interpreter: CommandInterpreter,
        interval_s: float = 3,
        poll_timeout_s: int = 1,
        initial_offset: int = 0,
    ) -> None:
        """
        Args:
            client: Telegram Bot API 客户端
            interpreter: 指令执行器
            interval_s: 相邻两个周期开始时间的间隔
            poll_timeout_s: getUpdates 长轮询超时
            initial_offset: 初始游标（最后一条已处理的 update_id）
        """
        self._client = client
        self._interpreter = interpreter
        self._interval_s = interval_s
        self._poll_timeout_s = poll_timeout_s
        self._cursor = initial_offset
        self._stopping = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> int:
        """执行一个轮询周期

        Returns:
            本周期分发给 interpreter 的消息条数
        """
        try:
            body = await self._client.get_updates(
                self._cursor + 1, timeout=self._poll_timeout_s
            )
        except ChannelError as e:
            log.warning(
                "poll_updates_failed",
                cursor=self._cursor,
                error=str(e),
                error_type=type(e).__name__,
            )
            return 0

        updates = body.get("result")
        if not body.get("ok") or not isinstance(updates, list):
            log.warning(
                "poll_updates_rejected",
                cursor=self._cursor,
                description=body.get("description"),
            )
            return 0

        dispatched = 0
        for update in updates:
            update_id = update.get("update_id") if isinstance(update, dict) else None
            if not isinstance(update_id, int) or update_id <= self._cursor:
                continue
            # 先推进游标：分发失败的 update 不会被再次拉取
            self._cursor = update_id

            message = self._normalize(update)
            if message is None or not message.content:
                continue

            dispatched += 1
            try:
                await self._interpreter.handle(message)
            except Exception as e:
                log.error(
                    "command_dispatch_failed",
                    update_id=update_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
        return dispatched

    @staticmethod
    def _normalize(update: dict[str, Any]) -> InboundMessage | None:
        try:
            return InboundMessage.from_update(update)
        except ValidationError as e:
            log.warning("malformed_update_skipped", update_id=update.get("update_id"), error=str(e))
            return None

    async def run(self) -> None:
        """轮询主循环，直到 stop() 被调用"""
        loop = asyncio.get_running_loop()
        log.info(
            "command_poller_started",
            interval_s=self._interval_s,
            cursor=self._cursor,
        )
        while not self._stopping.is_set():
            started = loop.time()
            try:
                await self.poll_once()
            except Exception as e:
                log.error(
                    "poll_cycle_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )

            remaining = self._interval_s - (loop.time() - started)
            if remaining > 0:
                try:
                    await asyncio.wait_for(self._stopping.wait(), timeout=remaining)
                except TimeoutError:
                    pass
        log.info("command_poller_stopped", cursor=self._cursor)

    def start(self) -> None:
        """在后台启动轮询循环（已运行时忽略）"""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self.run(), name="command-poller")

    async def stop(self) -> None:
        """请求停止并等待当前周期结束，超时则取消"""
        self._stopping.set()
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._task, timeout=STOP_GRACE_S)
        except TimeoutError:
            log.warning("command_poller_stop_timeout", cursor=self._cursor)
        except asyncio.CancelledError:
            pass
        self._task = None
