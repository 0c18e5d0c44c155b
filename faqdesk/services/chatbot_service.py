"""
FAQ 검색 기반 챗봇 답변 서비스

1) retrieve: 테넌트 FAQ 전체를 메시지와 비교해 점수화 (단어 유사도 + 부분문자열 가산점)
2) 점수 내림차순 정렬 (동점은 원래 순서 유지)
3) 최고 점수가 낮으면 문맥을 넓힌다 (기본 6개 → 12개)
4) 문맥 블록 + 테넌트 페르소나 프롬프트로 LLM 호출, 답변 본문을 그대로 반환
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import logging

from faqdesk.core.config import Settings, settings as default_settings
from faqdesk.services.chat_config_service import resolve_system_prompt
from faqdesk.services.llm_client import LLMClient
from faqdesk.services.similarity import similarity_score

logger = logging.getLogger(__name__)

SUBSTRING_BOOST = 0.4
NO_CONTEXT_PLACEHOLDER = "없음"
UNCATEGORIZED_LABEL = "미지정"
FAQ_LINK_PLACEHOLDER = "{{FAQ_LINK}}"
SUPPORT_LINK_PLACEHOLDER = "{{SUPPORT_LINK}}"


@dataclass
class RetrievedFAQ:
    """검색 후보 (FAQ 투영 + 점수)"""
    id: Any
    title: str
    content: str
    category: Optional[str]
    score: float = 0.0


def _project(faq: Any) -> RetrievedFAQ:
    if isinstance(faq, dict):
        get = faq.get
    else:
        def get(key, default=None):
            return getattr(faq, key, default)
    return RetrievedFAQ(
        id=get("id"),
        title=get("title") or "",
        content=get("content") or "",
        category=get("category") or None,
    )


def score_faq(message: str, faq: RetrievedFAQ) -> float:
    """max(제목/본문/카테고리 유사도) + 부분문자열 가산점 (1.0 초과 가능)"""
    title_score = similarity_score(message, faq.title)
    content_score = similarity_score(message, faq.content)
    cat_score = similarity_score(message, faq.category) if faq.category else 0.0
    msg_norm = (message or "").lower()
    boost = 0.0
    if msg_norm:
        if msg_norm in faq.title.lower():
            boost += SUBSTRING_BOOST
        if msg_norm in faq.content.lower():
            boost += SUBSTRING_BOOST
    return max(title_score, content_score, cat_score) + boost


def rank_faqs(message: str, faqs: Sequence[Any]) -> List[RetrievedFAQ]:
    """전체 FAQ 점수화 후 내림차순 정렬 (안정 정렬)"""
    scored = []
    for faq in faqs:
        item = _project(faq)
        item.score = score_faq(message, item)
        scored.append(item)
    return sorted(scored, key=lambda r: r.score, reverse=True)


def select_context_window(ranked: List[RetrievedFAQ], settings: Optional[Settings] = None) -> List[RetrievedFAQ]:
    """최고 점수가 낮으면 어휘 신호를 믿기 어려우므로 더 많은 후보를 넘긴다"""
    cfg = settings or default_settings
    max_score = ranked[0].score if ranked else 0.0
    if max_score < cfg.RETRIEVAL_LOW_SCORE:
        return ranked[: cfg.RETRIEVAL_TOP_K_WIDE]
    return ranked[: cfg.RETRIEVAL_TOP_K]


def render_context(top: List[RetrievedFAQ]) -> str:
    """문맥 블록 렌더링 (후보가 없으면 '없음')"""
    if not top:
        return NO_CONTEXT_PLACEHOLDER
    return "\n\n".join(
        f"#{idx} [카테고리:{f.category or UNCATEGORIZED_LABEL}] Q: {f.title}\nA: {f.content}"
        for idx, f in enumerate(top, start=1)
    )


def _substitute_links(text: str, faq_link: str, support_link: str) -> str:
    return text.replace(FAQ_LINK_PLACEHOLDER, faq_link).replace(SUPPORT_LINK_PLACEHOLDER, support_link)


def build_chat_messages(
    message: str,
    context: str,
    system_prompt: Optional[str],
    settings: Optional[Settings] = None,
) -> List[Dict[str, str]]:
    """system(페르소나) + user(질문/문맥/링크 지시) 메시지 구성"""
    cfg = settings or default_settings
    faq_link = cfg.faq_link
    support_link = cfg.SUPPORT_URL
    user_prompt = f"""
사용자 질문: {message}

관련 FAQ (관련도 순):
{context}

규칙을 준수하여 한국어로 답변하세요. 서비스 관련 시 FAQ 링크를 포함하고, 일반 인사/모호/지원불가 시 규칙에 따라 대응하세요.
FAQ 링크는 {faq_link} 입니다.
""".strip()
    return [
        {"role": "system", "content": _substitute_links(resolve_system_prompt(system_prompt), faq_link, support_link)},
        {"role": "user", "content": _substitute_links(user_prompt, faq_link, support_link)},
    ]


async def answer(
    message: str,
    faqs: Sequence[Any],
    system_prompt: Optional[str] = None,
    *,
    llm: Optional[LLMClient] = None,
    settings: Optional[Settings] = None,
) -> str:
    """FAQ 검색 후 LLM 답변 생성. 실패 시 LlmError 전파."""
    cfg = settings or default_settings
    ranked = rank_faqs(message, faqs)
    top = select_context_window(ranked, cfg)
    logger.info(
        f"[chatbot] faqs={len(ranked)} top_score={(ranked[0].score if ranked else 0.0):.3f} context={len(top)}"
    )
    messages = build_chat_messages(message, render_context(top), system_prompt, cfg)
    llm = llm or LLMClient(cfg)
    return await llm.complete(messages, purpose="chatbot-answer")
