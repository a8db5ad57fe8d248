"""TraceMiddleware -- 记录级追踪

针对单条记录的请求（/grievances/{id}/...、/diary/{id}）绑定 record_kind 与 record_id，
该请求期间的所有日志都携带这两个字段。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 路径首段 -> 记录种类
_RECORD_PREFIXES = {
    "grievances": "grievance",
    "diary": "diary",
}


class TraceMiddleware(BaseHTTPMiddleware):
    """记录级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        parts = [p for p in request.url.path.split("/") if p]
        if len(parts) >= 2 and parts[0] in _RECORD_PREFIXES:
            structlog.contextvars.bind_contextvars(
                record_kind=_RECORD_PREFIXES[parts[0]],
                record_id=parts[1],
            )

        return await call_next(request)
