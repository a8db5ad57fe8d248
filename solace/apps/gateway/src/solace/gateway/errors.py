"""异常到 HTTP 响应的映射

错误响应统一为 {"error": {"code": ..., "message": ...}}。
渠道失败不经过这里：它们写在各接口的 telegram 字段中。
"""

import aiosqlite
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from solace.core.exceptions import (
    InputValidationError,
    RecordConflictError,
    RecordNotFoundError,
)
from starlette.responses import JSONResponse

log = structlog.get_logger()


def error_response(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, **extra}},
    )


async def _input_validation_handler(request: Request, exc: InputValidationError) -> JSONResponse:
    return error_response(400, "VALIDATION_ERROR", exc.message, field=exc.field)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    return error_response(
        400,
        "VALIDATION_ERROR",
        first.get("msg", "invalid request"),
        field=".".join(loc) or None,
    )


async def _not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return error_response(404, f"{exc.kind.value.upper()}_NOT_FOUND", str(exc))


async def _conflict_handler(request: Request, exc: RecordConflictError) -> JSONResponse:
    log.error("record_conflict", record_kind=exc.kind.value, record_id=str(exc.key))
    return error_response(409, "RECORD_CONFLICT", str(exc))


async def _store_error_handler(request: Request, exc: aiosqlite.Error) -> JSONResponse:
    log.error(
        "store_operation_failed",
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return error_response(500, "STORE_ERROR", "storage operation failed")


def register_exception_handlers(app: FastAPI) -> None:
    """注册领域异常处理器"""
    app.add_exception_handler(InputValidationError, _input_validation_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(RecordNotFoundError, _not_found_handler)
    app.add_exception_handler(RecordConflictError, _conflict_handler)
    app.add_exception_handler(aiosqlite.Error, _store_error_handler)
