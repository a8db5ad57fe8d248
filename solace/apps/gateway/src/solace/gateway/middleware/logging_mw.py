"""LoggingMiddleware -- 请求级日志

每个请求分配一个 ULID request_id，绑定到 structlog contextvars 并写入 X-Request-ID 响应头。
请求结束记录状态码与耗时；未处理异常记录 request_failed 后继续向上抛出。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"

log = structlog.get_logger()


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.monotonic()
        try:
            response = await call_next(request)
        except Exception as e:
            log.error(
                "request_failed",
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise

        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
            client=request.client.host if request.client else None,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
