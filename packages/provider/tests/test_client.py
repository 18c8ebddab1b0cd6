"""CompletionClient 单元测试

Mock litellm.acompletion()，验证 complete()/chat()/stream_chat() 的参数构造、
结果包装与 ModelUnavailable 异常包装。
"""

from unittest.mock import MagicMock, patch

import pytest
from nexus.provider.client import CHAT_MAX_TOKENS, CompletionClient
from nexus.provider.exceptions import ModelUnavailable
from nexus.provider.models import ChatTurn, ImagePayload, ModelCallResult


@pytest.fixture
def client(provider_config):
    """创建 CompletionClient 实例"""
    return CompletionClient(provider_config)


def _make_mock_litellm_response(
    content: str = "Hello!",
    model: str = "gemini/test-pro",
    prompt_tokens: int = 10,
    completion_tokens: int = 20,
    total_tokens: int = 30,
):
    """构造 Mock LiteLLM acompletion 返回"""
    response = MagicMock()
    response.model = model

    choice = MagicMock()
    choice.message.content = content
    response.choices = [choice]

    usage = MagicMock()
    usage.prompt_tokens = prompt_tokens
    usage.completion_tokens = completion_tokens
    usage.total_tokens = total_tokens
    response.usage = usage

    return response


def _make_stream_chunk(text: str | None):
    """构造单个流式分片"""
    chunk = MagicMock()
    choice = MagicMock()
    choice.delta.content = text
    chunk.choices = [choice]
    return chunk


class _FakeStream:
    """可异步迭代的假流，可在指定位置抛出异常"""

    def __init__(self, texts: list[str], fail_after: int | None = None) -> None:
        self._texts = texts
        self._fail_after = fail_after
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for index, text in enumerate(self._texts):
            if self._fail_after is not None and index == self._fail_after:
                raise RuntimeError("stream broken")
            yield _make_stream_chunk(text)


class TestComplete:
    """complete() 方法测试"""

    @patch("nexus.provider.client.acompletion")
    async def test_successful_call(self, mock_acompletion, client):
        """成功调用返回完整 ModelCallResult"""
        mock_acompletion.return_value = _make_mock_litellm_response()

        result = await client.complete("안녕하세요", model_alias="smart")

        assert isinstance(result, ModelCallResult)
        assert result.content == "Hello!"
        assert result.model_alias == "smart"
        assert result.model_name == "gemini/test-pro"
        assert result.duration_ms >= 0

    @patch("nexus.provider.client.acompletion")
    async def test_alias_resolved_to_model_id(self, mock_acompletion, client):
        """语义 alias 解析为配置中的模型 ID"""
        mock_acompletion.return_value = _make_mock_litellm_response()

        await client.complete("test", model_alias="fast")

        assert mock_acompletion.call_args.kwargs["model"] == "gemini/test-flash"

    @patch("nexus.provider.client.acompletion")
    async def test_defaults_and_safety_settings(self, mock_acompletion, client):
        """默认温度/输出上限与安全阈值随每次调用传递"""
        mock_acompletion.return_value = _make_mock_litellm_response()

        await client.complete("test")

        kwargs = mock_acompletion.call_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 8192
        assert kwargs["api_key"] == "test-key"
        assert kwargs["timeout"] == 30
        assert len(kwargs["safety_settings"]) == 4
        assert all(s["threshold"] == "BLOCK_NONE" for s in kwargs["safety_settings"])

    @patch("nexus.provider.client.acompletion")
    async def test_json_mode_with_schema(self, mock_acompletion, client):
        """response_schema 作为 JSON 输出提示传递"""
        mock_acompletion.return_value = _make_mock_litellm_response(content="{}")
        schema = {"type": "object"}

        await client.complete("test", json_mode=True, response_schema=schema)

        response_format = mock_acompletion.call_args.kwargs["response_format"]
        assert response_format == {"type": "json_object", "response_schema": schema}

    @patch("nexus.provider.client.acompletion")
    async def test_grounding_omits_response_format(self, mock_acompletion, client):
        """检索增强调用挂载搜索工具，不携带 JSON 输出约束"""
        mock_acompletion.return_value = _make_mock_litellm_response()

        await client.complete("test", model_alias="grounded", json_mode=True, grounding=True)

        kwargs = mock_acompletion.call_args.kwargs
        assert kwargs["tools"] == [{"googleSearch": {}}]
        assert "response_format" not in kwargs
        assert kwargs["model"] == "gemini/test-grounded"

    @patch("nexus.provider.client.acompletion")
    async def test_images_precede_text(self, mock_acompletion, client):
        """图片部分排在指令文本之前"""
        mock_acompletion.return_value = _make_mock_litellm_response()
        images = [ImagePayload(data="AAAA"), ImagePayload(data="BBBB", mime_type="image/png")]

        await client.complete("frames", images=images)

        content = mock_acompletion.call_args.kwargs["messages"][0]["content"]
        assert [part["type"] for part in content] == ["image_url", "image_url", "text"]
        assert content[0]["image_url"]["url"] == "data:image/jpeg;base64,AAAA"
        assert content[1]["image_url"]["url"] == "data:image/png;base64,BBBB"
        assert content[2]["text"] == "frames"

    @patch("nexus.provider.client.acompletion")
    async def test_token_usage_parsed(self, mock_acompletion, client):
        """Token 使用数据正确解析"""
        mock_acompletion.return_value = _make_mock_litellm_response(
            prompt_tokens=50, completion_tokens=100, total_tokens=150
        )

        result = await client.complete("test")

        assert result.token_usage.prompt_tokens == 50
        assert result.token_usage.completion_tokens == 100
        assert result.token_usage.total_tokens == 150

    @patch("nexus.provider.client.acompletion")
    async def test_connection_error_wrapped(self, mock_acompletion, client):
        """连接错误包装为 ModelUnavailable(connection=True)"""
        mock_acompletion.side_effect = ConnectionError("Connection refused")

        with pytest.raises(ModelUnavailable) as exc_info:
            await client.complete("test")
        assert exc_info.value.connection is True
        assert exc_info.value.model == "gemini/test-pro"
        assert exc_info.value.recoverable is True

    @patch("nexus.provider.client.acompletion")
    async def test_other_error_wrapped(self, mock_acompletion, client):
        """其他上游错误同样包装为 ModelUnavailable，不自动重试"""
        mock_acompletion.side_effect = ValueError("quota exceeded")

        with pytest.raises(ModelUnavailable) as exc_info:
            await client.complete("test")
        assert exc_info.value.connection is False
        assert "quota exceeded" in str(exc_info.value)
        assert mock_acompletion.call_count == 1


class TestChat:
    """chat() 方法测试"""

    @patch("nexus.provider.client.acompletion")
    async def test_preamble_seeded_once(self, mock_acompletion, client, chat_history):
        """前导语以启动轮 + 确认轮注入，历史 model 角色映射为 assistant"""
        mock_acompletion.return_value = _make_mock_litellm_response(content="답변")

        result = await client.chat(chat_history, "다음 할 일은?", "PREAMBLE", "ACK")

        messages = mock_acompletion.call_args.kwargs["messages"]
        assert messages[0] == {"role": "user", "content": "PREAMBLE"}
        assert messages[1] == {"role": "assistant", "content": "ACK"}
        assert [m["role"] for m in messages[2:]] == ["user", "assistant", "user"]
        assert messages[-1]["content"] == "다음 할 일은?"
        assert sum(1 for m in messages if m["content"] == "PREAMBLE") == 1
        assert mock_acompletion.call_args.kwargs["max_tokens"] == CHAT_MAX_TOKENS
        assert result.content == "답변"

    @patch("nexus.provider.client.acompletion")
    async def test_history_not_mutated(self, mock_acompletion, client, chat_history):
        """不修改调用方的 history"""
        mock_acompletion.return_value = _make_mock_litellm_response()
        before = list(chat_history)

        await client.chat(chat_history, "hi", "P", "A")

        assert chat_history == before


class TestStreamChat:
    """stream_chat() 方法测试"""

    @patch("nexus.provider.client.acompletion")
    async def test_chunks_in_order(self, mock_acompletion, client):
        """分片按顺序产出，空分片被跳过"""
        mock_acompletion.return_value = _FakeStream(["안녕", "", "하세요"])

        chunks = [c async for c in client.stream_chat([], "hi")]

        assert [c.text for c in chunks] == ["안녕", "하세요"]
        assert all(c.error is None for c in chunks)
        assert mock_acompletion.call_args.kwargs["stream"] is True
        assert mock_acompletion.return_value.closed is True

    @patch("nexus.provider.client.acompletion")
    async def test_early_stop_closes_upstream(self, mock_acompletion, client):
        """消费方提前停止迭代时关闭上游流"""
        upstream = _FakeStream(["a", "b", "c"])
        mock_acompletion.return_value = upstream

        stream = client.stream_chat([], "hi")
        first = await anext(stream)
        await stream.aclose()

        assert first.text == "a"
        assert upstream.closed is True

    @patch("nexus.provider.client.acompletion")
    async def test_stream_without_preamble_sends_only_turns(self, mock_acompletion, client):
        """未给出前导语时不注入启动轮，人设由调用方提供"""
        mock_acompletion.return_value = _FakeStream(["ok"])

        [c async for c in client.stream_chat([], "hi")]

        messages = mock_acompletion.call_args.kwargs["messages"]
        assert messages == [{"role": "user", "content": "hi"}]

    @patch("nexus.provider.client.acompletion")
    async def test_mid_stream_failure_yields_single_error(self, mock_acompletion, client):
        """流中途失败：已产出分片保留，随后恰好一个 error 分片"""
        mock_acompletion.return_value = _FakeStream(["a", "b", "c"], fail_after=2)

        chunks = [c async for c in client.stream_chat([], "hi")]

        assert [c.text for c in chunks[:2]] == ["a", "b"]
        assert chunks[2].error == "stream broken"
        assert len(chunks) == 3

    @patch("nexus.provider.client.acompletion")
    async def test_open_failure_yields_error(self, mock_acompletion, client):
        """发起阶段失败同样以 error 分片结束，不向外抛出"""
        mock_acompletion.side_effect = ConnectionError("down")

        chunks = [c async for c in client.stream_chat([], "hi")]

        assert len(chunks) == 1
        assert chunks[0].error == "down"

    @patch("nexus.provider.client.acompletion")
    async def test_image_attached_to_last_turn(self, mock_acompletion, client):
        """附带图片时最后一轮为多部分内容"""
        mock_acompletion.return_value = _FakeStream(["ok"])
        history = [ChatTurn(role="model", content="무엇을 도와드릴까요?")]

        chunks = [
            c
            async for c in client.stream_chat(
                history,
                "이 이미지 설명해줘",
                image=ImagePayload(data="QUJD", mime_type="image/png"),
                system_preamble="P",
                acknowledgment="A",
            )
        ]

        messages = mock_acompletion.call_args.kwargs["messages"]
        assert messages[2] == {"role": "assistant", "content": "무엇을 도와드릴까요?"}
        last = messages[-1]["content"]
        assert last[0]["image_url"]["url"] == "data:image/png;base64,QUJD"
        assert last[1] == {"type": "text", "text": "이 이미지 설명해줘"}
        assert chunks[0].text == "ok"
