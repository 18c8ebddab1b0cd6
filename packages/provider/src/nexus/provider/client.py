"""CompletionClient -- 生成式 AI 调用封装

通过 litellm.acompletion() 调用 Gemini，提供三种调用形态：
- complete(): 单次补全（可附带图片、JSON 输出提示、检索增强工具）
- chat(): 多轮对话，system 前导语以"用户启动轮 + 模型确认轮"注入
- stream_chat(): 流式多模态对话，失败时产出一个 error 分片后结束
"""

import time
from collections.abc import AsyncIterator, Sequence
from typing import Any

import structlog
from litellm import acompletion

from .config import ProviderConfig
from .exceptions import ModelUnavailable, ProviderError
from .models import ChatTurn, ImagePayload, ModelCallResult, StreamChunk, TokenUsage
from .registry import ModelRegistry

log = structlog.get_logger()

# 多轮对话最大输出 token 数
CHAT_MAX_TOKENS = 1000

# 流式对话最大输出 token 数
STREAM_MAX_TOKENS = 4096

# 流式对话未知错误时的提示
STREAM_UNKNOWN_ERROR = "스트리밍 중 알 수 없는 오류가 발생했습니다."

# 连接类异常类型集合
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    TimeoutError,
)


def _is_connection_error(e: Exception) -> bool:
    """判断异常是否为连接/超时类错误"""
    if isinstance(e, _CONNECTION_ERROR_TYPES):
        return True
    # LiteLLM 的连接/超时异常
    error_name = type(e).__name__
    return error_name in ("APIConnectionError", "APITimeoutError", "Timeout")


def _user_content(text: str, images: Sequence[ImagePayload]) -> str | list[dict[str, Any]]:
    """构建 user 消息内容

    无图片时为纯文本；有图片时为多部分内容，图片在前、文本在后。
    """
    if not images:
        return text
    parts: list[dict[str, Any]] = [
        {"type": "image_url", "image_url": {"url": image.to_data_url()}}
        for image in images
    ]
    if text:
        parts.append({"type": "text", "text": text})
    return parts


def _to_messages(history: Sequence[ChatTurn]) -> list[dict[str, Any]]:
    """ChatTurn 列表 -> LiteLLM messages（model 角色映射为 assistant）"""
    return [
        {
            "role": "assistant" if turn.role == "model" else "user",
            "content": turn.content,
        }
        for turn in history
    ]


def _seed_messages(system_preamble: str | None, acknowledgment: str) -> list[dict[str, Any]]:
    """system 前导语 -> 启动用 user 轮 + 模型确认轮（仅在对话开头注入一次）"""
    if not system_preamble:
        return []
    return [
        {"role": "user", "content": system_preamble},
        {"role": "assistant", "content": acknowledgment},
    ]


def _parse_usage(response: Any) -> TokenUsage:
    """从 LiteLLM 响应解析 token 使用"""
    usage = getattr(response, "usage", None)
    if usage is None:
        return TokenUsage()
    try:
        return TokenUsage(
            prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
            completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
            total_tokens=int(getattr(usage, "total_tokens", 0) or 0),
        )
    except (TypeError, ValueError):
        return TokenUsage()


class CompletionClient:
    """Gemini 调用客户端

    持有 API 密钥与模型映射；所有上游失败统一包装为 ModelUnavailable，
    不做自动重试。
    """

    def __init__(
        self,
        config: ProviderConfig,
        registry: ModelRegistry | None = None,
    ) -> None:
        """初始化客户端

        Args:
            config: Provider 配置（密钥、模型、超时、安全阈值）
            registry: 模型注册表，None 时按 config 创建
        """
        self._config = config
        self._registry = registry or ModelRegistry(config)

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    def _call_kwargs(
        self,
        model_id: str,
        messages: list[dict[str, Any]],
        temperature: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        """构建 acompletion 公共参数"""
        call_kwargs: dict[str, Any] = {
            "model": model_id,
            "messages": messages,
            "temperature": (
                temperature if temperature is not None else self._config.temperature
            ),
            "max_tokens": max_tokens or self._config.max_output_tokens,
            "timeout": self._config.timeout_s,
            "safety_settings": self._config.safety_settings(),
        }
        api_key = self._config.api_key.get_secret_value()
        if api_key:
            call_kwargs["api_key"] = api_key
        return call_kwargs

    async def complete(
        self,
        prompt: str,
        model_alias: str = "smart",
        *,
        images: Sequence[ImagePayload] = (),
        json_mode: bool = False,
        response_schema: dict[str, Any] | None = None,
        grounding: bool = False,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ModelCallResult:
        """单次补全

        Args:
            prompt: 指令文本
            model_alias: 语义 alias 或完整模型 ID
            images: 随指令附带的内联图片
            json_mode: 请求 JSON 输出
            response_schema: JSON 输出 schema 提示（隐含 json_mode）
            grounding: 挂载 Google Search 检索增强工具
            temperature: 采样温度，None 使用配置默认
            max_tokens: 最大输出 token 数，None 使用配置默认

        Returns:
            ModelCallResult，content 为补全文本

        Raises:
            ModelUnavailable: 上游调用失败
        """
        messages = [{"role": "user", "content": _user_content(prompt, images)}]
        extra: dict[str, Any] = {}
        if grounding:
            # Gemini 不支持检索工具与受控 JSON 输出同时使用，JSON 约束仅保留在指令中
            extra["tools"] = [{"googleSearch": {}}]
        elif response_schema is not None:
            extra["response_format"] = {
                "type": "json_object",
                "response_schema": response_schema,
            }
        elif json_mode:
            extra["response_format"] = {"type": "json_object"}

        return await self._call(
            messages,
            model_alias,
            temperature=temperature,
            max_tokens=max_tokens,
            **extra,
        )

    async def chat(
        self,
        history: Sequence[ChatTurn],
        new_turn: str,
        system_preamble: str,
        acknowledgment: str,
        model_alias: str = "smart",
    ) -> ModelCallResult:
        """多轮对话

        前导语只在对话开头以"启动轮 + 确认轮"注入一次，不随每轮重发。
        不修改调用方的 history，新轮次与回复由调用方自行追加。

        Raises:
            ModelUnavailable: 上游调用失败
        """
        messages = [
            *_seed_messages(system_preamble, acknowledgment),
            *_to_messages(history),
            {"role": "user", "content": new_turn},
        ]
        return await self._call(messages, model_alias, max_tokens=CHAT_MAX_TOKENS)

    async def stream_chat(
        self,
        history: Sequence[ChatTurn],
        message: str,
        model_alias: str = "smart",
        image: ImagePayload | None = None,
        system_preamble: str | None = None,
        acknowledgment: str = "",
    ) -> AsyncIterator[StreamChunk]:
        """流式多模态对话

        惰性、只前进、不可重启的分片序列。消费方可随时停止迭代；
        上游失败（发起时或流中途）时产出恰好一个 error 分片后结束，不向外抛出。
        """
        model_id = self._registry.resolve(model_alias)
        messages = [
            *_seed_messages(system_preamble, acknowledgment),
            *_to_messages(history),
            {"role": "user", "content": _user_content(message, [image] if image else [])},
        ]
        call_kwargs = self._call_kwargs(model_id, messages, None, STREAM_MAX_TOKENS)

        log.debug(
            "model_stream_start",
            model_alias=model_alias,
            model_name=model_id,
            message_count=len(messages),
            has_image=image is not None,
        )
        chunk_count = 0
        response = None
        try:
            response = await acompletion(stream=True, **call_kwargs)
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    chunk_count += 1
                    yield StreamChunk(text=text)
        except Exception as e:
            log.error(
                "model_stream_failed",
                model_name=model_id,
                error=str(e),
                error_type=type(e).__name__,
                chunk_count=chunk_count,
            )
            yield StreamChunk(error=str(e) or STREAM_UNKNOWN_ERROR)
            return
        finally:
            # 消费方提前停止迭代时同样释放上游连接
            close = getattr(response, "aclose", None)
            if close is not None:
                await close()

        log.info("model_stream_completed", model_name=model_id, chunk_count=chunk_count)

    async def _call(
        self,
        messages: list[dict[str, Any]],
        model_alias: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> ModelCallResult:
        """发送非流式请求并包装结果/异常"""
        model_id = self._registry.resolve(model_alias)
        start_time = time.monotonic()

        try:
            call_kwargs = self._call_kwargs(model_id, messages, temperature, max_tokens)
            call_kwargs.update(kwargs)

            log.debug(
                "model_call_start",
                model_alias=model_alias,
                model_name=model_id,
                message_count=len(messages),
            )

            response = await acompletion(**call_kwargs)

            duration_ms = int((time.monotonic() - start_time) * 1000)
            content = response.choices[0].message.content or ""

            result = ModelCallResult(
                content=content,
                model_alias=model_alias,
                model_name=getattr(response, "model", None) or model_id,
                duration_ms=duration_ms,
                token_usage=_parse_usage(response),
            )

            log.info(
                "model_call_completed",
                model_alias=model_alias,
                model_name=result.model_name,
                duration_ms=duration_ms,
                total_tokens=result.token_usage.total_tokens,
            )
            return result

        except ProviderError:
            # 已包装的异常直接抛出
            raise
        except Exception as e:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            log.error(
                "model_call_failed",
                model_alias=model_alias,
                model_name=model_id,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=duration_ms,
            )
            raise ModelUnavailable(
                model=model_id,
                original_error=e,
                connection=_is_connection_error(e),
            ) from e
