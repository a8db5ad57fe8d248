"""健康检查路由

GET /:       兼容旧客户端的存活探测，返回 {"ok": true}
GET /health: Liveness 检查，永远返回 200
GET /ready:  Readiness 检查，包含 SQLite 连通性、上传目录、磁盘空间；
             profile=channel 时额外调用 getMe 探测 Telegram。
"""

import shutil
from pathlib import Path

import aiosqlite
import structlog
from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/")
async def root():
    return {"ok": True}


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="检查范围：core（默认）仅本地依赖；channel 额外探测 Telegram",
    ),
):
    """Readiness 检查

    检查项：
    1. sqlite: 数据库连通性
    2. upload_dir: 上传目录可访问性
    3. disk_space_mb: 上传目录所在磁盘剩余空间
    4. telegram: 仅 profile=channel 时真实探测
    """
    effective_profile = profile or "core"

    checks = {}
    all_ok = True

    # 1. SQLite 连通性检查
    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except (aiosqlite.Error, ValueError) as e:
        checks["sqlite"] = f"error: {e}"
        all_ok = False

    # 2. 上传目录检查
    upload_dir = Path(request.app.state.upload_dir)
    if upload_dir.is_dir():
        checks["upload_dir"] = "ok"
    else:
        checks["upload_dir"] = "error: directory does not exist"
        all_ok = False

    # 3. 磁盘空间检查
    try:
        disk_usage = shutil.disk_usage(upload_dir if upload_dir.is_dir() else "/")
        checks["disk_space_mb"] = disk_usage.free // (1024 * 1024)
    except OSError:
        checks["disk_space_mb"] = 0
        all_ok = False

    # 4. Telegram 探测
    if effective_profile == "channel":
        gateway = request.app.state.notification_gateway
        if not gateway.client.configured:
            checks["telegram"] = "not_configured"
            all_ok = False
        elif await gateway.client.health_check():
            checks["telegram"] = "ok"
        else:
            log.warning("telegram_health_check_failed")
            checks["telegram"] = "unreachable"
            all_ok = False
    else:
        checks["telegram"] = "skipped"

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "profile": effective_profile,
            "checks": checks,
        },
    )
