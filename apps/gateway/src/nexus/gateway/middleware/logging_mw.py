"""LoggingMiddleware -- 请求级日志

每个请求绑定 request_id（沿用客户端传入的合法 ULID，否则新生成），
请求结束时按状态码分级记录耗时，并在响应头回传 X-Request-ID。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"


def resolve_request_id(inbound: str | None) -> str:
    """客户端传入合法 ULID 时沿用，便于前端把重试请求串联到同一条日志链"""
    if inbound:
        try:
            return str(ULID.from_str(inbound))
        except ValueError:
            pass
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        log = structlog.get_logger()

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = int((time.monotonic() - start) * 1000)

        # 上游模型失败以 502 返回，需要在日志里突出
        if response.status_code >= 500:
            await log.aerror(
                "request_completed", status_code=response.status_code, duration_ms=duration_ms
            )
        elif response.status_code >= 400:
            await log.awarning(
                "request_completed", status_code=response.status_code, duration_ms=duration_ms
            )
        else:
            await log.ainfo(
                "request_completed", status_code=response.status_code, duration_ms=duration_ms
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
