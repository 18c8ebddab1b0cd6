"""视频抽帧 -- 上传视频分析路径的本地预处理

用 OpenCV 从 0 秒开始每隔 interval_s 秒抓取一帧（直到时长为止），
编码为 JPEG 并转 base64，作为内联图片交给 CompletionClient。
"""

import base64
from pathlib import Path

import cv2
import structlog
from nexus.core.config import FRAME_INTERVAL_S
from nexus.provider.models import ImagePayload

from .exceptions import FrameExtractionError

log = structlog.get_logger()

# JPEG 编码质量
JPEG_QUALITY = 85

# 超过该宽度的帧等比缩小，控制请求体积
MAX_FRAME_WIDTH = 960


def _encode_frame(frame) -> str | None:
    height, width = frame.shape[:2]
    if width > MAX_FRAME_WIDTH:
        scale = MAX_FRAME_WIDTH / width
        frame = cv2.resize(
            frame,
            (MAX_FRAME_WIDTH, max(int(height * scale), 1)),
            interpolation=cv2.INTER_AREA,
        )
    ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY])
    if not ok:
        return None
    return base64.b64encode(buffer.tobytes()).decode("ascii")


def extract_frames(
    video_path: str | Path,
    interval_s: int = FRAME_INTERVAL_S,
) -> tuple[list[ImagePayload], float]:
    """按固定间隔抽帧

    Args:
        video_path: 视频文件路径
        interval_s: 抽帧间隔（秒）

    Returns:
        (帧列表, 视频时长秒数)

    Raises:
        FrameExtractionError: 文件无法打开或未抽取到任何帧
    """
    if interval_s <= 0:
        raise ValueError("interval_s must be positive")

    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise FrameExtractionError(str(video_path), "无法打开视频文件")

    frames: list[ImagePayload] = []
    try:
        fps = cap.get(cv2.CAP_PROP_FPS)
        frame_count = cap.get(cv2.CAP_PROP_FRAME_COUNT)
        duration = frame_count / fps if fps > 0 else 0.0

        current = 0.0
        while current <= duration:
            cap.set(cv2.CAP_PROP_POS_MSEC, current * 1000)
            ret, frame = cap.read()
            if not ret or frame is None:
                # 末尾 seek 可能越界
                break
            data = _encode_frame(frame)
            if data is not None:
                frames.append(ImagePayload(data=data, mime_type="image/jpeg"))
            current += interval_s
    finally:
        cap.release()

    if not frames:
        raise FrameExtractionError(str(video_path), "未能抽取到任何帧")

    log.info(
        "video_frames_extracted",
        video_path=str(video_path),
        frame_count=len(frames),
        duration_s=round(duration, 2),
        interval_s=interval_s,
    )
    return frames, duration
