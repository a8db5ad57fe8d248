"""Telegram HTML parse_mode 辅助函数"""

# Telegram 拒绝解析 HTML 时响应 description 中出现的特征子串
MARKUP_ERROR_MARKERS: tuple[str, ...] = (
    "can't parse entities",
    "unsupported start tag",
    "can't find end tag",
    "unexpected end tag",
)

# Telegram 文本与 caption 长度上限
MESSAGE_MAX_LENGTH = 4096
CAPTION_MAX_LENGTH = 1024


def escape_html(s: object = "") -> str:
    """转义 HTML parse_mode 下的保留字符 & < >"""
    return (
        str(s if s is not None else "")
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def is_markup_error(response: dict | None) -> bool:
    """判断 Telegram 响应是否为标记解析失败"""
    if not response or response.get("ok"):
        return False
    description = str(response.get("description", "")).lower()
    return any(marker in description for marker in MARKUP_ERROR_MARKERS)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"
