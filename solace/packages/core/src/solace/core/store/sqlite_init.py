"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL + 索引创建。
表结构采用媒体附件列齐全的超集版本：grievances 与 diary_notes
均带 audio_url / telegram_file_id，且二者不可同时非空。
"""

import aiosqlite

# grievances 表 DDL
_GRIEVANCES_DDL = """
CREATE TABLE IF NOT EXISTS grievances (
    grievance_id      TEXT PRIMARY KEY,
    username          TEXT NOT NULL,
    text              TEXT NOT NULL,
    reply             TEXT,
    audio_url         TEXT,
    telegram_file_id  TEXT,
    created_at        TEXT NOT NULL,
    replied_at        TEXT,

    CHECK ((reply IS NULL) = (replied_at IS NULL)),
    CHECK (audio_url IS NULL OR telegram_file_id IS NULL)
);
"""

_GRIEVANCES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_grievances_created_at ON grievances(created_at);",
]

# moods 表 DDL
_MOODS_DDL = """
CREATE TABLE IF NOT EXISTS moods (
    mood_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    username    TEXT NOT NULL,
    value       INTEGER NOT NULL CHECK (value BETWEEN 0 AND 10),
    created_at  TEXT NOT NULL
);
"""

_MOODS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_moods_created_at ON moods(created_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_moods_username ON moods(username, created_at DESC);",
]

# diary_notes 表 DDL
_DIARY_DDL = """
CREATE TABLE IF NOT EXISTS diary_notes (
    note_id           TEXT PRIMARY KEY,
    username          TEXT,
    title             TEXT,
    body              TEXT NOT NULL,
    audio_url         TEXT,
    telegram_file_id  TEXT,
    created_at        TEXT NOT NULL,

    CHECK (audio_url IS NULL OR telegram_file_id IS NULL)
);
"""

_DIARY_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_diary_created_at ON diary_notes(created_at DESC);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_GRIEVANCES_DDL)
    await conn.execute(_MOODS_DDL)
    await conn.execute(_DIARY_DDL)

    # 创建索引
    for idx_sql in _GRIEVANCES_INDEXES + _MOODS_INDEXES + _DIARY_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
