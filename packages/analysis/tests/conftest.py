"""Analysis 包测试 fixtures"""

import json

import pytest
from nexus.core.models import Task


@pytest.fixture
def sample_task() -> Task:
    return Task(
        id="task-001",
        title="프로모션 랜딩 페이지 기획",
        description="신규 구독 상품 출시용 랜딩 페이지 구성안 작성",
        product="웹",
        type="기능",
    )


@pytest.fixture
def resource_payload() -> dict:
    """模型返回的知识资源分析 JSON（含章节）"""
    return {
        "basicInfo": {
            "title": "FastAPI 입문 강좌",
            "summary": "FastAPI로 REST API를 만드는 방법을 소개합니다.",
            "level": "INTERMEDIATE",
            "tags": ["python", "fastapi"],
            "author": "홍길동",
            "contentType": "video",
        },
        "metadata": {
            "duration": 930,
            "language": "ko",
            "category": "개발",
            "subCategory": "Backend",
            "uploadedAt": "2026-10-01T09:00:00Z",
            "department": None,
        },
        "searchOptimization": {
            "keywords": ["FastAPI", "REST", "비동기"],
            "searchableText": "FastAPI 기초부터 배포까지",
            "chapters": [
                {
                    "title": "소개",
                    "startTime": "00:00",
                    "endTime": "05:30",
                    "summary": "강좌 개요",
                },
                {
                    "title": "라우팅",
                    "timestamp": "05:30-15:30",
                    "summary": "경로 연산 정의",
                },
            ],
        },
        "managementInfo": {
            "status": "active",
            "visibility": "team",
            "originalFileUrl": "https://evil.example.com/other",
            "thumbnailUrl": None,
            "fileSize": None,
            "lastUpdated": "2026-10-01T09:00:00Z",
        },
    }


@pytest.fixture
def resource_json(resource_payload) -> str:
    return json.dumps(resource_payload, ensure_ascii=False)
