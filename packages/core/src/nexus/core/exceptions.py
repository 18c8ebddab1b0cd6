"""Core 异常体系 -- 仓库层错误"""


class StoreError(Exception):
    """Store 包基础异常"""


class EntityNotFound(StoreError):
    """引用了不存在的实体 ID

    对该操作是致命的：调用方应视为编程错误或过期引用，不做重试。
    """

    def __init__(self, kind: str, entity_id: str) -> None:
        """
        Args:
            kind: 实体类型（task / knowledge / analysis）
            entity_id: 未找到的 ID
        """
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class DuplicateEntity(StoreError):
    """创建时 ID 已存在"""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} already exists: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class InvalidStatusTransition(StoreError):
    """知识资源状态流转不合法（如 archived 资源请求重试）"""

    def __init__(self, entity_id: str, from_status: str, to_status: str) -> None:
        super().__init__(
            f"invalid transition for {entity_id}: {from_status} -> {to_status}"
        )
        self.entity_id = entity_id
        self.from_status = from_status
        self.to_status = to_status
