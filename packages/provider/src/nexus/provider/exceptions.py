"""Provider 异常体系"""


class ProviderError(Exception):
    """Provider 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可由用户手动重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class ModelUnavailable(ProviderError):
    """上游模型调用失败（网络、配额、内容策略拦截等）

    不做自动重试，直接抛给调用方；用户可通过专门的重试操作手动重试。
    """

    def __init__(
        self,
        model: str,
        original_error: Exception,
        connection: bool = False,
    ) -> None:
        """
        Args:
            model: 实际调用的模型 ID
            original_error: 原始异常
            connection: 是否为连接/超时类错误
        """
        super().__init__(
            f"AI 模型 ({model}) 调用失败: {original_error}",
            recoverable=True,
        )
        self.model = model
        self.original_error = original_error
        self.connection = connection
