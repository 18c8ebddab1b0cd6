"""Prompt Builder -- 各用例的提示词模板

纯函数：输入请求上下文，输出指令字符串，无状态、无 I/O、不会失败。
所有模板都在指令中声明"只输出 JSON"，但 normalizer 不依赖模型遵守。
生成内容的语言固定为韩语，直接写在各模板的指令中。
"""

import re

from nexus.core.config import CHAPTER_MIN_DURATION_S
from nexus.core.models import Task

# 失败哨兵（资源分析 / 视频帧分析共用）
RESOURCE_FAILURE_SENTINEL = (
    '{"error": "Analysis failed", '
    '"reason": "Insufficient content or metadata available at the provided URL."}'
)
FRAMES_FAILURE_SENTINEL = (
    '{"error": "Analysis failed", "reason": "Insufficient frames to determine video content."}'
)

# 任务对话的模型确认轮
CHAT_ACKNOWLEDGMENT = "네, 알겠습니다. 업무 진행을 도와드리겠습니다."

# 通用流式助手人设
ASSISTANT_PREAMBLE = (
    "당신은 Nexus AI 플랫폼의 지능형 어시스턴트 Gemini입니다. "
    "사용자의 업무 생산성을 높이고, 창의적인 아이디어를 제공하며, "
    "친절하고 전문적인 태도로 대화하세요. 한국어로 답변하세요."
)
ASSISTANT_GREETING = "반갑습니다! Nexus AI Gemini입니다. 무엇을 도와드릴까요?"

_YOUTUBE_ID_RE = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")


def extract_youtube_video_id(url: str) -> str | None:
    """从 YouTube URL 提取 11 位视频 ID，不匹配时返回 None"""
    match = _YOUTUBE_ID_RE.match(url)
    if match and len(match.group(2)) == 11:
        return match.group(2)
    return None


def build_draft_prompt(raw_input: str) -> str:
    """粗略想法 -> 3 种风格（표준/상세/간결）的任务草稿，输出 JSON 数组"""
    return f"""
당신은 IT 선도 기업의 수석 PM(Project Manager)입니다.
사용자가 입력한 거친(Rough) 업무 아이디어를 분석하여, 개발팀이나 디자인팀이 즉시 착수할 수 있는 "전문적인 업무 명세서" 초안을 3가지 스타일로 제안하세요.

[입력 메시지]
"{raw_input}"

[작성 지침]
다음 3가지 스타일의 옵션을 포함한 리스트를 생성하세요:
1. "표준(Standard)": 균형 잡힌 전문적인 스타일.
2. "상세(Detailed)": 배경, 상세 요건, 기대 효과 등을 매우 구체적으로 기술.
3. "간결(Concise)": 핵심만 빠르게 파악할 수 있는 요약 스타일.

각 항목은 다음 필드를 포함해야 합니다:
- title: 명확하고 전문적인 제목 (한국어)
- description: 스타일(표준/상세/간결)에 맞춘 상세 설명 (한국어, 줄바꿈 포함)
- priority: 'HIGH', 'MEDIUM', 'LOW' 중 택1
- product: 제품군 추론
- type: 업무 유형 (버그, 기능, UX 등)
- styleTag: "표준", "상세", "간결" 중 하나

응답은 정확히 3개의 객체로 이루어진 JSON 배열(Array)이어야 합니다.
JSON 외의 설명이나 마크다운은 포함하지 마세요.
"""


def build_task_analysis_prompt(task: Task) -> str:
    """任务 -> markdown 执行策略 + 2-5 个推荐资料，输出 JSON 对象"""
    return f"""
당신은 시니어 프로젝트 매니저이자 기술 튜터입니다.
다음 업무를 분석하여 실무자가 **가장 먼저 파악해야 할 핵심 지식(Context)**과 **구체적인 실행 전략**을 제시하세요.

[업무 정보]
제목: {task.title}
제품: {task.product}
설명: {task.description}

[요청 사항]
1. strategy 필드에는 다음 내용을 마크다운 형식으로 작성하세요:
   - 🧐 **핵심 파악 사항**: 이 업무를 시작하기 전 반드시 알아야 할 개념, 기술 스택, 혹은 비즈니스 맥락.
   - 🚀 **단계별 실행 가이드**: 구체적인 Action Item 기반의 전략.
   - 💡 **성공 팁**: 예상되는 어려움이나 효율성을 높이는 팁.
   - ⚠️ **리스크 요인**: 발생 가능한 잠재적 문제와 대응 방안.

2. suggestedResources 필드에는 업무와 관련된 양질의 학습 자료(문서, 블로그, 영상 등) 2-5개를 {{"title", "url"}} 형태로 추천하세요.

응답은 {{"strategy": "...", "suggestedResources": [...]}} 형태의 단일 JSON 객체여야 하며, JSON 외의 텍스트는 포함하지 마세요.
모든 응답은 "한국어"로 작성해주세요.
"""


def build_subtask_prompt(task: Task) -> str:
    """任务 -> 4-6 个可执行检查项，输出 [{title}] JSON 数组"""
    return f"""
다음 업무를 4-6개의 실행 가능한 체크리스트 항목(하위 업무)으로 분해해주세요.
업무: {task.title}
문맥: {task.description}
응답은 각 항목이 'title' 필드를 가진 객체로 이루어진 한국어 JSON 배열입니다. JSON 외의 텍스트는 포함하지 마세요.
"""


def build_chat_system_prompt(task: Task) -> str:
    """任务对话的 system 前导语（自由文本，无格式约束）"""
    return (
        f"System: 당신은 다음 업무를 돕는 친절한 어시스턴트입니다. "
        f"제목: {task.title}, 설명: {task.description}. 답변은 한국어로 작성하세요."
    )


def build_resource_analysis_prompt(url: str, video_id: str | None = None) -> str:
    """URL -> 知识资源结构化分析（检索增强 + 章节 + 失败哨兵约定）"""
    search_target = f'site:youtube.com "{video_id}"' if video_id else url
    chapter_minutes = CHAPTER_MIN_DURATION_S // 60

    return f"""
당신은 기업 내부 지식관리(KM) 시스템을 위한 영상/문서 분석 AI입니다.
제공된 URL의 콘텐츠(영상 또는 문서)를 분석하여 체계적으로 데이터베이스에 저장할 수 있는 구조화된 정보를 추출하세요.

[TARGET URL]
{url}

[CRITICAL HINT - For Search Grounding]
Search Query: {search_target}
Video ID: {video_id or "N/A"}

[SEARCH STRATEGY]
1. **Primary Search**: 콘텐츠 본문, 자막(transcript), 챕터 정보를 먼저 찾으세요.
2. **Secondary Search**: 직접 접근이 제한되면 Video ID 또는 URL로 "제목", "채널명", "설명"을 검색하세요.

[CRITICAL RULE - 실패 응답 규칙]
URL의 콘텐츠를 확신을 가지고 분석할 수 없다면(메타데이터, 자막, 설명 텍스트 부족 등) 절대 추측하거나 내용을 지어내지 마세요.
대신 아래 JSON 객체를 그대로 반환하세요:
{RESOURCE_FAILURE_SENTINEL}

[OUTPUT FORMAT - JSON ONLY]
아래 JSON 스키마에 맞춰 응답해주세요. 순수 JSON만 반환하고, JSON 외의 설명이나 마크다운은 포함하지 마세요.

{{
  "basicInfo": {{
    "title": "제목을 명확하고 간결하게 (최대 50자, 찾지 못하면 URL 표기)",
    "summary": "핵심 내용을 1-2문장으로 요약",
    "level": "BEGINNER, INTERMEDIATE, ADVANCED 중 하나 선택 (기본값: BEGINNER)",
    "tags": ["관련 기술/주제/분야를 나타내는 태그 5-7개"],
    "author": "작성자나 발표자 (없으면 null)",
    "contentType": "video 또는 article (URL에 따라 자동 판단)"
  }},
  "metadata": {{
    "duration": "영상의 길이(초 단위, 정수, 없으면 0)",
    "language": "ko",
    "category": "개발, 디자인, 마케팅, 운영, 기타 중 하나",
    "subCategory": "세부 카테고리 (예: Frontend, Backend, UI/UX 등)",
    "uploadedAt": "현재 시간을 ISO 8601 형식으로",
    "department": "해당 내용과 가장 관련있는 부서명 추정 (없으면 null)"
  }},
  "searchOptimization": {{
    "keywords": ["검색에 유용한 키워드 10-15개 추출"],
    "searchableText": "주요 내용을 포괄하는 텍스트 (200-300자).",
    "chapters": [
      {{
        "title": "챕터 제목",
        "startTime": "시작 시간 (예: 01:23)",
        "endTime": "종료 시간 (예: 05:45)",
        "summary": "해당 구간의 내용 요약 (1-2문장)"
      }}
    ]
  }},
  "managementInfo": {{
    "status": "active",
    "visibility": "team",
    "originalFileUrl": "{url}",
    "thumbnailUrl": null,
    "fileSize": null,
    "lastUpdated": "현재 시간을 ISO 8601 형식으로"
  }}
}}

중요 지침:
- 영상이 {chapter_minutes}분 미만이면 chapters를 빈 배열로 두세요.
- 영상이 {chapter_minutes}분 이상이면 3-5개의 의미있는 챕터로 구분하세요.
- 정보가 부족하면 chapters 대신 keywords를 풍부하게 작성하세요.
- 제목, 요약, 태그, 키워드, 챕터 등 모든 텍스트는 반드시 한국어로 작성하세요.
- 분석이 불가능하면 반드시 위의 실패 JSON 객체를 반환하세요.
"""


def build_quick_summary_prompt(url: str) -> str:
    """URL -> 서론/본론/결론 三段 markdown 摘要（自由文本）"""
    return f"""
당신은 콘텐츠 요약 전문가입니다.
다음 URL의 콘텐츠를 분석하세요: {url}
간결하고 구조화된 요약을 한국어로 작성해야 합니다.
요약은 서론, 본론, 결론의 세 부분으로 나누어야 합니다.

다음 마크다운 형식을 사용하세요:
### 서론
[콘텐츠가 다루는 주제나 문제를 간략히 소개]

### 본론
[콘텐츠에서 제시하는 핵심 내용, 주장, 단계를 요약]

### 결론
[핵심 시사점, 해결책 또는 최종 메시지로 마무리]

응답 전체를 한국어로 작성하고, 이 구조 밖의 서문이나 텍스트는 추가하지 마세요.
"""


def build_video_frames_prompt(frame_count: int, duration: float) -> str:
    """视频帧序列 -> 整体摘要 + 场景列表（秒）+ 关键词，带失败哨兵约定"""
    return f"""
당신은 영상 콘텐츠 분석에 특화된 AI 어시스턴트입니다.
총 길이 {round(duration)}초인 영상에서 추출한 {frame_count}개의 프레임을 순서대로 제공했습니다.
이 프레임들을 바탕으로 아래 작업을 수행하고, 순수하고 유효한 JSON 형식으로만 응답하세요.
추가 텍스트나 마크다운 서식은 포함하지 마세요.

중요: 요약, 제목, 키워드 등 모든 텍스트는 반드시 한국어로 작성하세요.

[CRITICAL RULE - 실패 응답 규칙]
제공된 프레임만으로 영상 내용을 파악하기에 충분하지 않다면 절대 추측하지 말고 아래 JSON 객체를 그대로 반환하세요:
{FRAMES_FAILURE_SENTINEL}

응답은 다음 구조의 JSON 객체여야 합니다:
{{
  "overallSummary": "영상 전체 내용의 간결한 요약",
  "scenes": [
    {{
      "title": "장면 제목",
      "summary": "이 장면의 핵심 사건이나 주제 (1-2문장)",
      "startTime": 0,
      "endTime": 0
    }}
  ],
  "keywords": ["키워드1", "키워드2", "키워드3"]
}}

지침:
1. overallSummary: 모든 프레임의 정보를 종합하여 영상 전체를 요약하세요.
2. scenes: 서로 구분되는 장면이나 주제를 찾으세요. startTime과 endTime은 초 단위 정수이며, 프레임 순서와 총 길이를 바탕으로 추정하세요.
3. keywords: 영상 내용을 가장 잘 설명하는 키워드를 나열하세요.
"""
