"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、上传目录、请求体大小限制、列表分页等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("SOLACE_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径

    优先级：SOLACE_DB_PATH > DATABASE_URL（sqlite:/// 前缀或纯路径）> 默认路径
    """
    if val := os.environ.get("SOLACE_DB_PATH"):
        return val
    if val := os.environ.get("DATABASE_URL"):
        return val.removeprefix("sqlite:///")
    return str(_get_base_dir() / "sqlite" / "solace.db")


def get_upload_dir() -> Path:
    """获取本地上传文件（音频）存储目录"""
    return Path(
        os.environ.get(
            "SOLACE_UPLOAD_DIR",
            str(_get_base_dir() / "uploads"),
        )
    )


def get_port() -> int:
    """获取 HTTP 监听端口（PORT / SOLACE_PORT，默认 4000）"""
    val = os.environ.get("PORT") or os.environ.get("SOLACE_PORT")
    try:
        return int(val) if val else 4000
    except ValueError:
        return 4000


# 上传文件大小上限（字节）
MAX_UPLOAD_BYTES: int = int(
    os.environ.get("SOLACE_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))
)

# multipart 封装（边界、表单字段）允许的额外字节；Content-Length 超过
# MAX_UPLOAD_BYTES + 此值的上传在解析表单前即被拒绝
MULTIPART_OVERHEAD_BYTES: int = 64 * 1024

# JSON 请求体大小上限（字节）
JSON_BODY_MAX_BYTES: int = int(
    os.environ.get("SOLACE_JSON_BODY_MAX_BYTES", str(200 * 1024))
)

# 本地上传文件对外暴露的 URL 前缀
UPLOAD_URL_PREFIX: str = "/uploads"

# 日记列表默认条数与上下限
DIARY_DEFAULT_LIMIT: int = 20
DIARY_MIN_LIMIT: int = 1
DIARY_MAX_LIMIT: int = 100

# 心情列表返回的最近条数
MOODS_LIST_LIMIT: int = 100

# 心情取值范围
MOOD_MIN_VALUE: int = 0
MOOD_MAX_VALUE: int = 10
