"""异常处理器 -- 类型化异常 -> {"error": {"code", "message"}} 响应

消息为面向用户的韩语文本；原始错误细节只进日志。
"""

import structlog
from fastapi import FastAPI, Request
from nexus.analysis.exceptions import AnalysisFailed, FrameExtractionError, MalformedResponse
from nexus.core.exceptions import DuplicateEntity, EntityNotFound, InvalidStatusTransition
from nexus.provider import ModelUnavailable
from starlette.responses import JSONResponse

log = structlog.get_logger()


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """统一错误响应格式"""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def _model_unavailable(request: Request, exc: ModelUnavailable) -> JSONResponse:
    log.error("model_unavailable", model=exc.model, connection=exc.connection, error=str(exc))
    return error_response(
        502,
        "MODEL_UNAVAILABLE",
        "AI 모델 호출에 실패했습니다. 잠시 후 다시 시도해주세요.",
    )


async def _malformed_response(request: Request, exc: MalformedResponse) -> JSONResponse:
    return error_response(
        502,
        "MALFORMED_RESPONSE",
        "AI 응답을 해석할 수 없습니다. 다시 시도해주세요.",
    )


async def _analysis_failed(request: Request, exc: AnalysisFailed) -> JSONResponse:
    return error_response(422, "ANALYSIS_FAILED", f"분석 실패: {exc.reason}")


async def _frame_extraction_failed(
    request: Request, exc: FrameExtractionError
) -> JSONResponse:
    log.warning("frame_extraction_failed", path=exc.path, error=str(exc))
    return error_response(422, "FRAME_EXTRACTION_FAILED", "프레임 추출에 실패했습니다.")


async def _entity_not_found(request: Request, exc: EntityNotFound) -> JSONResponse:
    return error_response(
        404,
        "ENTITY_NOT_FOUND",
        f"요청한 항목을 찾을 수 없습니다: {exc.kind} {exc.entity_id}",
    )


async def _invalid_transition(
    request: Request, exc: InvalidStatusTransition
) -> JSONResponse:
    return error_response(
        409,
        "INVALID_TRANSITION",
        f"현재 상태({exc.from_status})에서는 요청을 처리할 수 없습니다.",
    )


async def _duplicate_entity(request: Request, exc: DuplicateEntity) -> JSONResponse:
    return error_response(
        409,
        "DUPLICATE_ENTITY",
        f"이미 존재하는 항목입니다: {exc.kind} {exc.entity_id}",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """注册全部异常处理器（按异常类的 MRO 匹配最具体的处理器）"""
    app.add_exception_handler(ModelUnavailable, _model_unavailable)
    app.add_exception_handler(MalformedResponse, _malformed_response)
    app.add_exception_handler(AnalysisFailed, _analysis_failed)
    app.add_exception_handler(FrameExtractionError, _frame_extraction_failed)
    app.add_exception_handler(EntityNotFound, _entity_not_found)
    app.add_exception_handler(InvalidStatusTransition, _invalid_transition)
    app.add_exception_handler(DuplicateEntity, _duplicate_entity)
