"""
FAQ 서비스 - 비즈니스 로직

상담 로그 → FAQ 생성 흐름(generate_faqs):
  검증 → LLM 추출 → 정규화 → 카테고리 매핑 → confidence 필터 → 일괄 저장 → 결과
- 실패 지점: 검증(ValidationError), 추출(LlmError), 저장(StorageError)
- 내부 재시도 없음
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, or_
from sqlalchemy.exc import SQLAlchemyError

from faqdesk.core.config import Settings, settings as default_settings
from faqdesk.core.errors import LlmError, NotFoundError, StorageError, ValidationError
from faqdesk.models.faq import FAQArticle
from faqdesk.schemas.faq import FAQArticleCreate, FAQArticleUpdate
from faqdesk.services.category_service import find_category_by_name, list_categories, pick_category
from faqdesk.services.faq_extraction import (
    FAQCandidate,
    build_extraction_messages,
    normalize_faq_items,
    parse_top_level_shape,
    sanitize_media,
)
from faqdesk.services.llm_client import LLMClient

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """FAQ 생성 결과

    skipped_duplicates: 기존 FAQ와의 중복 검사는 아직 없으므로 항상 0
    """
    items: List[FAQArticle] = field(default_factory=list)
    added_count: int = 0
    skipped_duplicates: int = 0
    total_after: int = 0


async def count_faqs(db: AsyncSession, tenant_id: int) -> int:
    """테넌트 FAQ 개수"""
    res = await db.execute(
        select(func.count()).select_from(FAQArticle).where(FAQArticle.tenant_id == tenant_id)
    )
    return int(res.scalar_one() or 0)


def filter_by_confidence(candidates: Iterable[FAQCandidate], threshold: float) -> List[FAQCandidate]:
    """confidence가 없거나 threshold 이상인 후보만 남긴다 (순서 유지)"""
    return [c for c in candidates if c.confidence is None or c.confidence >= threshold]


async def generate_faqs(
    db: AsyncSession,
    tenant_id: int,
    raw_text: Optional[str],
    default_category: Optional[str] = None,
    *,
    llm: Optional[LLMClient] = None,
    settings: Optional[Settings] = None,
) -> GenerateResult:
    """상담 로그 텍스트로 FAQ를 생성/저장한다."""
    cfg = settings or default_settings
    if not raw_text or not raw_text.strip():
        raise ValidationError("raw_text is required", stage="validating")

    categories = await list_categories(db, tenant_id)

    llm = llm or LLMClient(cfg)
    logger.info(f"[faq] extract request tenant={tenant_id} model={cfg.LLM_MODEL} chars={len(raw_text)}")
    try:
        content = await llm.complete(build_extraction_messages(raw_text), purpose="faq-extract")
        logger.info(f"[faq] raw content snippet: {content[:500]}")
        raw_items = parse_top_level_shape(content)
    except LlmError as e:
        e.stage = "extracting"
        logger.warning(f"[faq] extraction failed tenant={tenant_id} status={e.status_code}: {e.detail}")
        raise

    candidates = normalize_faq_items(raw_items, default_category)
    for cand in candidates:
        choice = pick_category(
            cand.category,
            default_category,
            categories,
            threshold=cfg.CATEGORY_MATCH_THRESHOLD,
        )
        cand.category = choice.name
        cand.category_id = choice.id

    to_insert = filter_by_confidence(candidates, cfg.LLM_CONFIDENCE_THRESHOLD)
    logger.info(
        f"[faq] tenant={tenant_id} extracted={len(candidates)} kept={len(to_insert)} "
        f"threshold={cfg.LLM_CONFIDENCE_THRESHOLD}"
    )
    if not to_insert:
        return GenerateResult(items=[], added_count=0, skipped_duplicates=0, total_after=await count_faqs(db, tenant_id))

    rows = [
        FAQArticle(
            tenant_id=tenant_id,
            title=c.title,
            content=c.content,
            category=c.category,
            category_id=c.category_id,
            media=[m.to_dict() for m in c.media],
            source_type=c.source_type,
            confidence=c.confidence,
        )
        for c in to_insert
    ]
    # 전부 저장되거나 하나도 저장되지 않는다
    try:
        db.add_all(rows)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"[faq] batch insert failed tenant={tenant_id}: {e}")
        raise StorageError("FAQ 저장에 실패했습니다.", stage="persisting")

    for row in rows:
        await db.refresh(row)

    return GenerateResult(
        items=rows,
        added_count=len(rows),
        skipped_duplicates=0,
        total_after=await count_faqs(db, tenant_id),
    )


async def list_faqs(
    db: AsyncSession,
    tenant_id: int,
    query: Optional[str] = None,
    category: Optional[str] = None,
) -> List[FAQArticle]:
    """FAQ 목록 (제목/본문 부분일치, 카테고리 완전일치, 최신순)"""
    stmt = select(FAQArticle).where(FAQArticle.tenant_id == tenant_id)
    q = (query or "").strip().lower()
    if q:
        stmt = stmt.where(
            or_(
                func.lower(FAQArticle.title).contains(q, autoescape=True),
                func.lower(FAQArticle.content).contains(q, autoescape=True),
            )
        )
    if category:
        stmt = stmt.where(FAQArticle.category == category)
    res = await db.execute(stmt.order_by(FAQArticle.id.desc()))
    return list(res.scalars().all())


async def get_faq(db: AsyncSession, tenant_id: int, faq_id: int) -> FAQArticle:
    """FAQ 단건 조회 (다른 테넌트 소유면 NotFound)"""
    res = await db.execute(
        select(FAQArticle).where(FAQArticle.id == faq_id, FAQArticle.tenant_id == tenant_id)
    )
    item = res.scalar_one_or_none()
    if item is None:
        raise NotFoundError("FAQ 항목을 찾을 수 없습니다.")
    return item


async def _resolve_category_id(db: AsyncSession, tenant_id: int, category: Optional[str]) -> Optional[int]:
    if not category:
        return None
    cat = await find_category_by_name(db, tenant_id, category)
    return cat.id if cat else None


async def create_faq(db: AsyncSession, tenant_id: int, data: FAQArticleCreate) -> FAQArticle:
    """FAQ 수동 생성"""
    if not data.title or not data.content:
        raise ValidationError("title and content are required")

    category = data.category or None
    item = FAQArticle(
        tenant_id=tenant_id,
        title=data.title,
        content=data.content,
        category=category,
        category_id=await _resolve_category_id(db, tenant_id, category),
        media=[m.to_dict() for m in sanitize_media(data.media)],
        source_type=data.source_type or "manual",
        confidence=data.confidence,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def update_faq(db: AsyncSession, tenant_id: int, faq_id: int, data: FAQArticleUpdate) -> FAQArticle:
    """FAQ 수정 (보낸 필드만)"""
    item = await get_faq(db, tenant_id, faq_id)
    fields = data.model_fields_set

    if "title" in fields:
        if not data.title:
            raise ValidationError("title은 비워둘 수 없습니다.")
        item.title = data.title
    if "content" in fields:
        if not data.content:
            raise ValidationError("content는 비워둘 수 없습니다.")
        item.content = data.content
    if "category" in fields:
        category = data.category or None
        item.category = category
        item.category_id = await _resolve_category_id(db, tenant_id, category)
    if "media" in fields:
        item.media = [m.to_dict() for m in sanitize_media(data.media or [])]

    await db.commit()
    await db.refresh(item)
    return item


async def delete_faq(db: AsyncSession, tenant_id: int, faq_id: int) -> int:
    """FAQ 삭제"""
    item = await get_faq(db, tenant_id, faq_id)
    await db.delete(item)
    await db.commit()
    return faq_id


def _coerce_ids(ids: Iterable[Any]) -> List[int]:
    out: List[int] = []
    for v in ids or []:
        if isinstance(v, bool):
            continue
        try:
            as_float = float(v)
        except (TypeError, ValueError):
            continue
        if as_float.is_integer():
            out.append(int(as_float))
    return out


async def delete_faqs_bulk(db: AsyncSession, tenant_id: int, ids: Iterable[Any]) -> tuple[int, List[int]]:
    """FAQ 일괄 삭제 (해당 테넌트 행만). 반환: (삭제 개수, 해석된 id 목록)"""
    parsed = _coerce_ids(ids)
    if not parsed:
        raise ValidationError("ids array is required")
    res = await db.execute(
        delete(FAQArticle).where(FAQArticle.tenant_id == tenant_id, FAQArticle.id.in_(parsed))
    )
    await db.commit()
    logger.info(f"[faq] bulk delete tenant={tenant_id} ids={parsed} count={res.rowcount}")
    return int(res.rowcount or 0), parsed
