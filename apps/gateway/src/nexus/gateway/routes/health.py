"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含存储连通性与模型密钥配置。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查

    检查项：
    1. store: 存储后端可用（sqlite 执行 SELECT 1；内存后端直接 ok）
    2. api_key: Gemini 密钥是否已配置（未配置时 AI 动作必然失败）
    """
    checks = {}
    all_ok = True

    # 1. 存储连通性
    try:
        store_group = request.app.state.store_group
        if store_group.conn is not None:
            cursor = await store_group.conn.execute("SELECT 1")
            await cursor.fetchone()
            checks["store"] = "ok"
        else:
            checks["store"] = "ok (memory)"
    except Exception as e:
        log.warning("ready_check_store_failed", error=str(e))
        checks["store"] = f"error: {e}"
        all_ok = False

    # 2. 模型密钥
    provider_config = getattr(request.app.state, "provider_config", None)
    if provider_config is not None and provider_config.api_key.get_secret_value():
        checks["api_key"] = "configured"
    else:
        checks["api_key"] = "missing"
        all_ok = False

    status_code = 200 if all_ok else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )
