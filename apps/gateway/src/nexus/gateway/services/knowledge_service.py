"""KnowledgeService -- URL 知识资源分析 + 手动重试

失败策略：
- AnalysisFailed（模型声明数据不足）/ MalformedResponse（非法输出或字段错误）
  -> 存储 fallback 记录（draft，analysis_state=failed），可稍后重试
- ModelUnavailable（上游调用失败）-> 直接上抛，不落库

重试流程：active|draft -> draft（先落库）-> 重新分析 -> active|draft，
id 与 originalFileUrl 保持不变。archived 资源不可重试。
"""

from datetime import UTC, datetime

import structlog
from nexus.analysis.contracts import ResourceAnalysisPayload
from nexus.analysis.exceptions import AnalysisFailed, MalformedResponse
from nexus.analysis.mappers import to_knowledge_resource
from nexus.analysis.normalizer import build_fallback_resource, normalize
from nexus.analysis.prompts import build_resource_analysis_prompt, extract_youtube_video_id
from nexus.core.exceptions import InvalidStatusTransition
from nexus.core.models import (
    RETRYABLE_STATES,
    KnowledgeResource,
    ResourceStatus,
    validate_transition,
)
from nexus.core.store import StoreGroup
from nexus.provider import CompletionClient

from .request_guard import RequestGuard

log = structlog.get_logger()

# 检索增强分析的采样温度
ANALYSIS_TEMPERATURE = 0.4


class KnowledgeService:
    """知识库业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        client: CompletionClient,
        guard: RequestGuard,
    ) -> None:
        self._resources = store_group.knowledge_repo
        self._client = client
        self._guard = guard

    async def list_resources(self) -> list[KnowledgeResource]:
        return await self._resources.list_all()

    async def get_resource(self, resource_id: str) -> KnowledgeResource:
        return await self._resources.get(resource_id)

    async def delete_resource(self, resource_id: str) -> None:
        await self._resources.delete(resource_id)

    async def add_from_url(self, url: str) -> KnowledgeResource:
        """分析 URL 并新建资源

        Raises:
            ModelUnavailable: 上游调用失败（不落库）
        """
        resource = await self._analyze(url)
        return await self._resources.create(resource)

    async def retry(self, resource_id: str) -> KnowledgeResource:
        """重新分析已有资源

        Raises:
            EntityNotFound: resource_id 不存在
            InvalidStatusTransition: 资源状态不允许重试（archived）
            ModelUnavailable: 上游调用失败（资源保持 draft）
        """
        existing = await self._resources.get(resource_id)
        current = existing.management_info.status
        if current not in RETRYABLE_STATES or not validate_transition(
            current, ResourceStatus.DRAFT
        ):
            raise InvalidStatusTransition(resource_id, current, ResourceStatus.DRAFT)

        # 先回到 draft 再分析，分析中途失败时资源仍可再次重试
        pending = existing.model_copy(
            update={
                "management_info": existing.management_info.model_copy(
                    update={
                        "status": ResourceStatus.DRAFT,
                        "last_updated": datetime.now(UTC),
                    }
                )
            }
        )
        await self._resources.replace(pending)
        log.info("knowledge_retry_started", resource_id=resource_id, from_status=current)

        url = existing.management_info.original_file_url or ""
        token = self._guard.begin(resource_id, "analysis")
        try:
            resource = await self._analyze(url, resource_id=resource_id)
        finally:
            fresh = self._guard.finish(resource_id, "analysis", token)

        if not fresh:
            return await self._resources.get(resource_id)
        return await self._resources.replace(resource)

    async def _analyze(self, url: str, resource_id: str = "") -> KnowledgeResource:
        """调用检索增强分析并映射为资源（失败时返回 fallback 记录）"""
        prompt = build_resource_analysis_prompt(url, extract_youtube_video_id(url))
        result = await self._client.complete(
            prompt,
            "grounded",
            grounding=True,
            temperature=ANALYSIS_TEMPERATURE,
        )

        try:
            payload = normalize(result.content, ResourceAnalysisPayload)
        except AnalysisFailed as e:
            return self._fallback(url, e.reason, resource_id)
        except MalformedResponse as e:
            return self._fallback(url, str(e), resource_id)

        try:
            return to_knowledge_resource(payload, url, resource_id)
        except (ValueError, TypeError) as e:
            # 映射阶段的字段错误（含 pydantic ValidationError）同样落 fallback
            return self._fallback(url, f"{type(e).__name__}: {e}", resource_id)

    def _fallback(self, url: str, reason: str, resource_id: str) -> KnowledgeResource:
        log.warning(
            "analysis_fallback_used",
            url=url,
            resource_id=resource_id or None,
            reason=reason,
        )
        return build_fallback_resource(url, reason, resource_id)
