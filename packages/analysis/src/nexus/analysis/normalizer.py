"""Response Normalizer -- 补全文本 -> 契约约定的 JSON

处理链：strip_code_fences -> parse_json -> raise_if_failure_sentinel -> validate。
模型即使在指令中被要求"只输出 JSON"，这里也不信任它会遵守。

字段强制转换规则（优先级、时间字符串、难度、内容类型）集中在本模块，
由 contracts 中的校验器调用。
"""

import json
import re
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog
from nexus.core.config import RAW_PREVIEW_LENGTH
from nexus.core.models import (
    AnalysisState,
    BasicInfo,
    ContentType,
    KnowledgeResource,
    ManagementInfo,
    MetaData,
    Priority,
    ResourceLevel,
    ResourceStatus,
    SearchOptimization,
    Visibility,
)
from pydantic import BaseModel, ValidationError

from .exceptions import AnalysisFailed, MalformedResponse, SchemaMismatch

log = structlog.get_logger()

ContractT = TypeVar("ContractT", bound=BaseModel)

# fallback 记录的失败标记（保留原文，供旧数据/界面识别）
ANALYSIS_FAILED_TITLE = "분석 실패"
PARSE_FAILED_SUMMARY = "데이터를 파싱할 수 없습니다."
FALLBACK_CATEGORY = "기타"

_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
# 截断的响应可能只剩开头或结尾的围栏
_LEADING_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?[ \t]*```$")


# ============================================================
# 字段强制转换
# ============================================================


def parse_time_string(value: Any) -> int:
    """MM:SS / HH:MM:SS -> 整数秒

    按 ":" 切分后倒序，累加 value * 60^index。
    缺失、无冒号或任一分段不是整数时返回 0。
    """
    if not isinstance(value, str) or ":" not in value:
        return 0
    total = 0
    for index, part in enumerate(reversed(value.split(":"))):
        part = part.strip()
        if not part.isdecimal():
            return 0
        total += int(part) * 60**index
    return total


def coerce_seconds(value: Any) -> int:
    """数字或时间字符串 -> 非负整数秒"""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, str):
        text = value.strip()
        if ":" in text:
            return parse_time_string(text)
        value = text
    elif not isinstance(value, float):
        return 0
    # inf / nan / 非数字文本一律为 0
    try:
        return max(int(float(value)), 0)
    except (ValueError, OverflowError):
        return 0


def coerce_priority(value: Any) -> Priority:
    """{HIGH, MEDIUM, LOW} 之外的值一律为 MEDIUM"""
    if value in (Priority.HIGH.value, Priority.LOW.value):
        return Priority(value)
    return Priority.MEDIUM


def coerce_level(value: Any) -> ResourceLevel:
    """缺失或非法难度 -> BEGINNER"""
    if isinstance(value, str) and value in ResourceLevel.__members__:
        return ResourceLevel(value)
    return ResourceLevel.BEGINNER


def coerce_content_type(value: Any) -> ContentType:
    """缺失 -> article；无法识别 -> other"""
    if value is None or value == "":
        return ContentType.ARTICLE
    text = str(value).strip().lower()
    try:
        return ContentType(text)
    except ValueError:
        return ContentType.OTHER


def coerce_visibility(value: Any) -> Visibility:
    """缺失或非法可见范围 -> team"""
    try:
        return Visibility(str(value).strip().lower())
    except ValueError:
        return Visibility.TEAM


# ============================================================
# 处理链
# ============================================================


def strip_code_fences(text: str) -> str:
    """去除 markdown 代码围栏（完整包裹，或仅剩单侧）"""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1).strip()
    stripped = _LEADING_FENCE_RE.sub("", stripped, count=1)
    return _TRAILING_FENCE_RE.sub("", stripped, count=1).strip()


def parse_json(text: str) -> Any:
    """去围栏后解析 JSON

    Raises:
        MalformedResponse: 空响应或非法 JSON
    """
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        log.warning("malformed_response", reason="empty_response")
        raise MalformedResponse("模型返回了空响应", raw=text or "")

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        log.warning(
            "malformed_response",
            reason="invalid_json",
            error=str(e),
            raw_preview=cleaned[:RAW_PREVIEW_LENGTH],
        )
        raise MalformedResponse(f"模型响应不是合法 JSON: {e}", raw=text) from e


def raise_if_failure_sentinel(data: Any) -> None:
    """检测失败哨兵 {"error": X, "reason": Y}

    Raises:
        AnalysisFailed: 命中哨兵，reason 缺失时以 error 值代替
    """
    if not isinstance(data, dict):
        return
    error = data.get("error")
    if error in (None, "", False):
        return
    reason = data.get("reason") or str(error)
    log.info("analysis_failure_sentinel", error=str(error), reason=str(reason))
    raise AnalysisFailed(str(reason), error=str(error))


def validate(data: Any, contract: type[ContractT], raw: str = "") -> ContractT:
    """按契约校验已解析的 JSON

    契约声明了 wrapper_key 时，{wrapper_key: [...]} 形式的单键包装会被解开。

    Raises:
        SchemaMismatch: 结构不符
    """
    wrapper_key = getattr(contract, "wrapper_key", None)
    if wrapper_key and isinstance(data, dict) and wrapper_key in data:
        data = data[wrapper_key]

    try:
        return contract.model_validate(data)
    except ValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()[:3]
        )
        log.warning(
            "malformed_response",
            reason="schema_mismatch",
            contract=contract.__name__,
            error_count=e.error_count(),
            detail=detail,
            raw_preview=raw[:RAW_PREVIEW_LENGTH],
        )
        raise SchemaMismatch(contract.__name__, detail, raw=raw) from e
    except (TypeError, OverflowError) as e:
        # 校验器内部的类型错误不会被 pydantic 包装成 ValidationError
        log.warning(
            "malformed_response",
            reason="field_coercion_error",
            contract=contract.__name__,
            error=str(e),
            raw_preview=raw[:RAW_PREVIEW_LENGTH],
        )
        raise SchemaMismatch(contract.__name__, str(e), raw=raw) from e


def normalize(text: str, contract: type[ContractT]) -> ContractT:
    """补全文本 -> 契约实例

    Raises:
        MalformedResponse: 非法 JSON（含 SchemaMismatch）
        AnalysisFailed: 模型返回失败哨兵，不产出任何部分填充的对象
    """
    data = parse_json(text)
    raise_if_failure_sentinel(data)
    return validate(data, contract, raw=text)


def build_fallback_resource(
    url: str,
    reason: str,
    resource_id: str = "",
) -> KnowledgeResource:
    """分析失败时的 fallback 知识资源

    保留 originalFileUrl，状态为 draft（可重试），
    analysis_state=failed 是区分成败的权威标记。
    """
    now = datetime.now(UTC)
    return KnowledgeResource(
        id=resource_id,
        basic_info=BasicInfo(
            title=ANALYSIS_FAILED_TITLE,
            summary=PARSE_FAILED_SUMMARY,
            level=ResourceLevel.BEGINNER,
            tags=[],
            content_type=ContentType.ARTICLE,
        ),
        metadata=MetaData(category=FALLBACK_CATEGORY, uploaded_at=now),
        search_optimization=SearchOptimization(keywords=[], chapters=[]),
        management_info=ManagementInfo(
            status=ResourceStatus.DRAFT,
            visibility=Visibility.PRIVATE,
            original_file_url=url,
            last_updated=now,
            analysis_state=AnalysisState.FAILED,
            failure_reason=reason,
        ),
    )
