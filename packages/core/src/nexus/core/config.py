"""配置常量模块 -- 可通过环境变量覆盖

包含数据目录、数据库路径、存储后端选择以及 AI 分析相关的可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("NEXUS_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "NEXUS_DB_PATH",
        str(_get_base_dir() / "sqlite" / "nexus.db"),
    )


def get_store_backend() -> str:
    """获取存储后端：memory（默认，演示/测试）或 sqlite（生产）"""
    return os.environ.get("NEXUS_STORE_BACKEND", "memory").lower()


# 短于此时长（秒）的视频不生成章节，由模型自行执行，normalizer 不复核
CHAPTER_MIN_DURATION_S: int = 300

# 视频抽帧间隔（秒）
FRAME_INTERVAL_S: int = int(os.environ.get("NEXUS_FRAME_INTERVAL_S", "5"))

# 日志中原始模型输出的预览截断长度
RAW_PREVIEW_LENGTH: int = 200

# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = 15
