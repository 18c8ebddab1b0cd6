"""数据模型 -- 调用结果 + 对话轮次 + 流式分片"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class TokenUsage(BaseModel):
    """Token 使用统计

    key 命名对齐 OpenAI/LiteLLM 行业标准：
    prompt_tokens / completion_tokens / total_tokens
    """

    prompt_tokens: int = Field(default=0, ge=0, description="输入 token 数")
    completion_tokens: int = Field(default=0, ge=0, description="输出 token 数")
    total_tokens: int = Field(default=0, ge=0, description="总 token 数")


class ModelCallResult(BaseModel):
    """单次模型调用结果

    complete() 与 chat() 统一返回此类型，content 即补全文本。
    """

    content: str = Field(description="模型响应文本内容")
    model_alias: str = Field(description="请求时使用的语义 alias 或模型 ID")
    model_name: str = Field(default="", description="实际调用的模型 ID")
    duration_ms: int = Field(ge=0, description="端到端耗时（毫秒）")
    token_usage: TokenUsage = Field(
        default_factory=TokenUsage,
        description="Token 使用详情",
    )


class ChatTurn(BaseModel):
    """对话轮次 -- role 使用 user / model 两种角色"""

    role: Literal["user", "model"] = Field(description="发言方")
    content: str = Field(description="发言内容")


class ImagePayload(BaseModel):
    """内联图片载荷（base64）"""

    data: str = Field(description="base64 编码的图片数据")
    mime_type: str = Field(default="image/jpeg", description="MIME 类型")

    def to_data_url(self) -> str:
        """转换为 data URL（LiteLLM image_url 格式）"""
        return f"data:{self.mime_type};base64,{self.data}"


class StreamChunk(BaseModel):
    """流式对话分片 -- text 与 error 二选一"""

    text: str | None = Field(default=None, description="增量文本")
    error: str | None = Field(default=None, description="错误描述（流的最后一个元素）")

    @model_validator(mode="after")
    def _exactly_one(self) -> "StreamChunk":
        if (self.text is None) == (self.error is None):
            raise ValueError("StreamChunk requires exactly one of text / error")
        return self


class ModelInfo(BaseModel):
    """可供用户选择的对话模型"""

    id: str = Field(description="模型 ID 或 alias")
    name: str = Field(description="展示名称")
    description: str = Field(default="", description="模型说明")
    is_pro: bool = Field(default=False, description="是否为高阶模型")
