"""Analysis 异常体系 -- 模型输出规范化失败"""


class NormalizationError(Exception):
    """Analysis 包基础异常"""


class MalformedResponse(NormalizationError):
    """补全文本去除代码围栏后仍不是合法 JSON"""

    def __init__(self, message: str, raw: str = "") -> None:
        """
        Args:
            message: 错误描述
            raw: 原始补全文本
        """
        super().__init__(message)
        self.raw = raw


class SchemaMismatch(MalformedResponse):
    """JSON 合法但不符合该提示词约定的结构"""

    def __init__(self, contract: str, detail: str, raw: str = "") -> None:
        super().__init__(f"{contract} 结构校验失败: {detail}", raw=raw)
        self.contract = contract
        self.detail = detail


class AnalysisFailed(NormalizationError):
    """模型通过失败哨兵 {error, reason} 明确声明数据不足

    下游应将其呈现为实体上可区分的"失败"状态，而非一次性错误提示。
    """

    def __init__(self, reason: str, error: str = "") -> None:
        """
        Args:
            reason: 模型给出的失败原因
            error: 哨兵中的 error 字段
        """
        super().__init__(reason)
        self.reason = reason
        self.error = error


class FrameExtractionError(NormalizationError):
    """视频文件无法打开或未能抽取到任何帧"""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path
