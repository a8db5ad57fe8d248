"""BodySizeLimitMiddleware -- 请求体大小上限

超过 JSON_BODY_MAX_BYTES 的 JSON 请求直接返回 413，不进入路由。
multipart 上传按 Content-Length 预检：超过 MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD_BYTES
时在解析表单之前返回 413，避免整个文件先被缓存到临时文件；
未声明长度的 multipart 由上传路由在分块写入时限制。
"""

from solace.core.config import JSON_BODY_MAX_BYTES, MAX_UPLOAD_BYTES, MULTIPART_OVERHEAD_BYTES
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


def _too_large(message: str, field: str | None = None) -> JSONResponse:
    error: dict[str, str] = {"code": "PAYLOAD_TOO_LARGE", "message": message}
    if field:
        error["field"] = field
    return JSONResponse(status_code=413, content={"error": error})


def _declared_length(request: Request) -> int | None:
    content_length = request.headers.get("content-length")
    if content_length is not None and content_length.isdigit():
        return int(content_length)
    return None


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """请求体大小限制中间件"""

    def __init__(
        self,
        app,
        max_bytes: int = JSON_BODY_MAX_BYTES,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ) -> None:
        super().__init__(app)
        self._max_bytes = max_bytes
        self._max_upload_bytes = max_upload_bytes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        content_type = request.headers.get("content-type", "")
        declared = _declared_length(request)

        if content_type.startswith("multipart/form-data"):
            if declared is not None and declared > self._max_upload_bytes + MULTIPART_OVERHEAD_BYTES:
                return _too_large(f"file exceeds {self._max_upload_bytes} bytes", field="file")
            return await call_next(request)

        if not content_type.startswith("application/json"):
            return await call_next(request)

        if declared is not None:
            if declared > self._max_bytes:
                return _too_large(f"JSON body exceeds {self._max_bytes} bytes")
        else:
            # 无 Content-Length（分块传输）：读取后再判断，body 会缓存给下游
            body = await request.body()
            if len(body) > self._max_bytes:
                return _too_large(f"JSON body exceeds {self._max_bytes} bytes")

        return await call_next(request)
