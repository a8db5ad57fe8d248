"""structlog 配置模块

dev 模式：pretty print 可读输出
json 模式：结构化 JSON 输出
Logfire APM：LOGFIRE_SEND_TO_LOGFIRE 环境变量控制，false 时仅输出本地日志。
"""

import logging
import os

import structlog


def setup_logging() -> None:
    """初始化 structlog 配置

    SOLACE_LOG_FORMAT 选择渲染模式：
    - "json": 结构化 JSON 输出（生产环境）
    - "dev" (默认): pretty print 可读输出
    SOLACE_LOG_LEVEL 设置根 logger 级别（默认 INFO）。
    """
    log_format = os.environ.get("SOLACE_LOG_FORMAT", "dev")
    log_level = os.environ.get("SOLACE_LOG_LEVEL", "INFO")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # uvicorn / httpx 等标准库日志经同一 formatter 渲染
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # httpx 的 INFO 日志包含完整请求 URL（其中有 bot token）
    logging.getLogger("httpx").setLevel(logging.WARNING)


def setup_logfire(app=None) -> None:
    """Logfire 可选初始化（需安装 apm extra）

    LOGFIRE_SEND_TO_LOGFIRE 环境变量控制：
    - "true": 启用 Logfire APM（需要 LOGFIRE_TOKEN）
    - "false" (默认): 仅本地日志
    """
    send_to_logfire = os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower()
    if send_to_logfire != "true":
        return
    try:
        import logfire

        logfire.configure(service_name="solace-gateway")
        if app is not None:
            logfire.instrument_fastapi(app)
        logfire.instrument_httpx()
    except Exception as e:
        # APM 初始化失败时继续以本地日志运行
        structlog.get_logger().warning(
            "logfire_init_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
