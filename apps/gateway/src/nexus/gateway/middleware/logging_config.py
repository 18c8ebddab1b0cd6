"""structlog 配置模块

NEXUS_LOG_FORMAT=dev（默认）: ConsoleRenderer 彩色输出
NEXUS_LOG_FORMAT=json: JSONRenderer，非 ASCII 字符（韩语提示词、中文日志）原样输出
NEXUS_LOG_LEVEL: 根日志级别（默认 INFO）
"""

import logging
import os

import structlog

# 第三方库自带的高频日志，统一压到 WARNING
NOISY_LOGGERS: tuple[str, ...] = ("LiteLLM", "LiteLLM Router", "httpx", "httpcore")


def _build_renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging() -> None:
    """初始化 structlog 与标准库 logging

    structlog 事件与 LiteLLM / uvicorn 的标准库日志走同一处理链和同一渲染器。
    可重复调用（create_app 每次都会调用），根 logger 只保留一个 handler。
    """
    log_format = os.environ.get("NEXUS_LOG_FORMAT", "dev").lower()
    log_level = os.environ.get("NEXUS_LOG_LEVEL", "INFO").upper()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_build_renderer(log_format),
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
