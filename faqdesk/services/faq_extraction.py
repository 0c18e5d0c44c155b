"""
상담 로그 → FAQ 후보 추출

두 단계의 오류 허용도가 의도적으로 다르다.
- parse_top_level_shape: LLM 응답 전체의 형태 검사. 실패하면 LlmError(502) (배치 전체 실패)
- normalize_one_candidate: 항목 하나의 정규화. 절대 예외를 던지지 않는다 (기본값/플레이스홀더로 채움)
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from faqdesk.core.errors import LlmError
from faqdesk.schemas.faq import FAQ_FIELD_MAX_LENGTH

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "일반"
PLACEHOLDER_TITLE = "제목 없음"
DEFAULT_SOURCE_TYPE = "llm_import"
# 많은 추출 결과가 0을 '미지정' 의미로 사용하므로 0 이하는 중간값으로 보정한다
UNSET_CONFIDENCE_FALLBACK = 0.6

EXTRACTION_SYSTEM_PROMPT = "너는 고객 상담 로그를 FAQ로 추출하는 도우미다. 반드시 JSON 배열만 반환한다."

EXTRACTION_PROMPT_TEMPLATE = """너에게 한국어 고객 상담 로그나 Q/A가 뒤섞인 긴 텍스트 뭉치를 준다.

너의 작업:
1) 질문/답변을 문맥으로 최대한 정확히 추출한다. (Q/A 라벨이 없어도 질문과 답변을 짝지어라)
2) 슬래시(/), 쉼표(,), 번호(1., 1-1., 주-2 등)로 여러 질문이 묶여 있으면 각 질문을 분리해 별도 FAQ 항목으로 만든다. 동일 답변을 공유해도 질문별로 분리된 항목을 반환한다.
3) category는 질문 성격을 대표하는 짧은 한 단어/구(예: 배송, 결제, 계정, 환불 등)로 반드시 너(LLM)가 지정한다. 입력에 없으면 추정해 채워라.
4) confidence는 추출 정확도에 대한 현실적인 값(0.0~1.0)으로 지정한다. 정확히 0이나 1은 피하라.
5) 아래 JSON 배열만 반환하라. 다른 텍스트를 추가하지 말 것.
[
  { "question": "질문", "answer": "답변", "category": "카테고리", "confidence": 0.8 }
]

아래는 원본 텍스트이다:
---
{raw_text}
---"""


@dataclass
class MediaItem:
    """FAQ 첨부 미디어"""
    kind: str  # image | video
    url: str
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "url": self.url, "name": self.name}


@dataclass
class FAQCandidate:
    """정규화된 FAQ 후보 (저장 전)"""
    title: str
    content: str
    category: str
    confidence: Optional[float] = None
    source_type: str = DEFAULT_SOURCE_TYPE
    media: List[MediaItem] = field(default_factory=list)
    # 카테고리 매핑 결과 (pick_category 이후 채워짐)
    category_id: Optional[int] = None


def build_extraction_messages(raw_text: str) -> List[Dict[str, str]]:
    """추출용 chat.completions 메시지 구성"""
    return [
        {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
        {"role": "user", "content": EXTRACTION_PROMPT_TEMPLATE.replace("{raw_text}", raw_text)},
    ]


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        # ```json ... ``` 형태
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_top_level_shape(content: Optional[str]) -> List[Dict[str, Any]]:
    """LLM 응답 문자열을 원시 항목 배열로 변환

    허용 형태(순서대로 판별):
    1) 배열
    2) {"items": [...]}
    3) {"questions": [...]}
    4) {"question": ..., "answer": ...} 단일 객체 → 1개짜리 배열
    그 외 형태/JSON 아님/빈 응답은 LlmError(502).
    """
    if content is None or not str(content).strip():
        raise LlmError("LLM 응답이 비어 있습니다.", 502)

    try:
        parsed = json.loads(_strip_code_fence(str(content)))
    except (json.JSONDecodeError, ValueError) as e:
        raise LlmError(f"LLM 응답이 JSON 형식이 아닙니다: {e}", 502)

    if isinstance(parsed, list):
        logger.info(f"[faq] parsed array len: {len(parsed)}")
        return [x for x in parsed if isinstance(x, dict)]
    if isinstance(parsed, dict):
        for key in ("items", "questions"):
            if isinstance(parsed.get(key), list):
                logger.info(f"[faq] parsed {key} len: {len(parsed[key])}")
                return [x for x in parsed[key] if isinstance(x, dict)]
        if parsed.get("question") and parsed.get("answer"):
            logger.info("[faq] parsed single object -> array wrap")
            return [parsed]
        raise LlmError(f"LLM 응답 형식을 해석할 수 없습니다. keys={list(parsed.keys())[:10]}", 502)

    raise LlmError(f"LLM 응답 형식을 해석할 수 없습니다: {type(parsed).__name__}", 502)


def _as_text(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, str):
        return val.strip()
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return str(val)
    return ""


def _coerce_confidence(val: Any) -> Optional[float]:
    # bool은 int의 하위 타입이지만 신뢰도로 보지 않는다
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        return None
    try:
        conf = float(val)
    except OverflowError:
        # float로 표현할 수 없는 거대한 JSON 정수
        return None
    if not math.isfinite(conf):
        return None
    if conf <= 0:
        return UNSET_CONFIDENCE_FALLBACK
    return conf


def _clip(text: str, field_name: str) -> str:
    """컬럼 길이를 넘는 LLM 출력은 잘라낸다 (배치 전체 저장 실패 방지)"""
    limit = FAQ_FIELD_MAX_LENGTH[field_name]
    if len(text) <= limit:
        return text
    logger.info(f"[faq] {field_name} truncated {len(text)} -> {limit}")
    return text[:limit].rstrip()


def sanitize_media(entries: Any) -> List[MediaItem]:
    """url이 있는 항목만 남긴다. kind는 명시적 video가 아니면 image."""
    if not isinstance(entries, list):
        return []
    out: List[MediaItem] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        url = _as_text(entry.get("url"))
        if not url:
            continue
        kind = "video" if entry.get("kind") == "video" else "image"
        name = _as_text(entry.get("name")) or None
        out.append(MediaItem(kind=kind, url=url, name=name))
    return out


def normalize_one_candidate(item: Any, default_category: Optional[str] = None) -> FAQCandidate:
    """원시 항목 1개를 FAQ 후보로 정규화 (예외 없음)"""
    if not isinstance(item, dict):
        item = {}
    title = _as_text(item.get("question")) or _as_text(item.get("title")) or PLACEHOLDER_TITLE
    content = _as_text(item.get("answer")) or _as_text(item.get("content"))
    category = (
        _as_text(item.get("category"))
        or _as_text(default_category)
        or DEFAULT_CATEGORY
    )
    source_type = _as_text(item.get("source_type")) or DEFAULT_SOURCE_TYPE
    return FAQCandidate(
        title=_clip(title, "title"),
        content=content,
        category=_clip(category, "category"),
        confidence=_coerce_confidence(item.get("confidence")),
        source_type=_clip(source_type, "source_type"),
        media=sanitize_media(item.get("media")),
    )


def normalize_faq_items(raw_items: List[Any], default_category: Optional[str] = None) -> List[FAQCandidate]:
    """원시 항목 목록 정규화 (순서 유지)"""
    return [normalize_one_candidate(item, default_category) for item in (raw_items or [])]
