"""Channel 异常体系

这些异常只在 TelegramClient 与 NotificationGateway 之间传递，
NotificationGateway 对外从不抛出，统一转为结果对象。
"""


class ChannelError(Exception):
    """Channel 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试或降级恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class ChannelUnreachableError(ChannelError):
    """Telegram API 不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, api_url: str, original_error: Exception) -> None:
        """
        Args:
            api_url: 尝试访问的 API 方法地址（已去除凭据）
            original_error: 原始异常
        """
        super().__init__(
            f"Telegram API 不可达: {api_url} -- {type(original_error).__name__}: {original_error}",
            recoverable=True,
        )
        self.api_url = api_url
        self.original_error = original_error
