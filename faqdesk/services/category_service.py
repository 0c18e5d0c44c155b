"""
FAQ 카테고리 서비스 - 비즈니스 로직
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from faqdesk.core.errors import NotFoundError, ValidationError
from faqdesk.models.faq import FAQArticle
from faqdesk.models.faq_category import Category
from faqdesk.services.faq_extraction import DEFAULT_CATEGORY
from faqdesk.services.similarity import similarity_score

logger = logging.getLogger(__name__)

# 기존 카테고리의 '다른 표현'과 '새 카테고리'를 가르는 경험적 경계값
CATEGORY_MATCH_THRESHOLD = 0.4


@dataclass
class CategoryChoice:
    """카테고리 매핑 결과"""
    id: Optional[int]
    name: str
    score: float = 0.0


def pick_category(
    suggested: Optional[str],
    fallback: Optional[str],
    categories: Sequence,
    threshold: float = CATEGORY_MATCH_THRESHOLD,
) -> CategoryChoice:
    """LLM 제안 카테고리를 기존 카테고리에 매핑한다.

    - 기존 카테고리가 없거나 제안값이 비어 있으면 제안값/기본값/'일반'을 그대로 사용
    - 유사도가 가장 높은 카테고리(동점이면 앞선 것)가 threshold 이상이면 그 카테고리의
      id와 '저장된 이름'을 사용 (비슷한 라벨이 하나의 이름으로 수렴)
    - 미만이면 제안값을 자유 텍스트 카테고리로 사용 (카테고리 행은 만들지 않는다)

    categories 항목은 .id/.name 속성을 가진 객체(ORM 행) 또는 {"id", "name"} dict.
    """
    suggested = (suggested or "").strip() or None
    if not categories or not suggested:
        return CategoryChoice(id=None, name=suggested or (fallback or "").strip() or DEFAULT_CATEGORY)

    best: Optional[CategoryChoice] = None
    for cat in categories:
        cat_id = cat["id"] if isinstance(cat, dict) else cat.id
        cat_name = cat["name"] if isinstance(cat, dict) else cat.name
        score = similarity_score(suggested, cat_name)
        if best is None or score > best.score:
            best = CategoryChoice(id=cat_id, name=cat_name, score=score)

    if best is not None and best.score >= threshold:
        return best
    return CategoryChoice(id=None, name=suggested)


async def list_categories(db: AsyncSession, tenant_id: int) -> List[Category]:
    """테넌트 카테고리 목록 (이름순)"""
    result = await db.execute(
        select(Category)
        .where(Category.tenant_id == tenant_id)
        .order_by(Category.name.asc(), Category.id.asc())
    )
    return list(result.scalars().all())


async def get_category(db: AsyncSession, tenant_id: int, category_id: int) -> Category:
    """카테고리 조회 (다른 테넌트 소유면 NotFound)"""
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.tenant_id == tenant_id)
    )
    cat = result.scalar_one_or_none()
    if cat is None:
        raise NotFoundError("카테고리를 찾을 수 없습니다.")
    return cat


async def find_category_by_name(db: AsyncSession, tenant_id: int, name: str) -> Optional[Category]:
    """이름 완전일치 카테고리 (여러 개면 id가 작은 것)"""
    result = await db.execute(
        select(Category)
        .where(Category.tenant_id == tenant_id, Category.name == name)
        .order_by(Category.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


def _clean_name(name: Optional[str]) -> str:
    text = (name or "").strip()
    if not text:
        raise ValidationError("카테고리명을 입력해주세요.")
    return text


async def create_category(db: AsyncSession, tenant_id: int, name: Optional[str]) -> Category:
    """카테고리 생성"""
    cat = Category(tenant_id=tenant_id, name=_clean_name(name))
    db.add(cat)
    await db.commit()
    await db.refresh(cat)
    logger.info(f"[category] created tenant={tenant_id} id={cat.id} name={cat.name}")
    return cat


async def rename_category(db: AsyncSession, tenant_id: int, category_id: int, name: Optional[str]) -> Category:
    """카테고리명 수정"""
    new_name = _clean_name(name)
    cat = await get_category(db, tenant_id, category_id)
    cat.name = new_name
    await db.commit()
    await db.refresh(cat)
    return cat


async def delete_category(db: AsyncSession, tenant_id: int, category_id: int) -> int:
    """카테고리 삭제

    FAQ의 자유 텍스트 category는 그대로 두고 category_id 연결만 끊는다.
    """
    cat = await get_category(db, tenant_id, category_id)
    await db.execute(
        update(FAQArticle)
        .where(FAQArticle.tenant_id == tenant_id, FAQArticle.category_id == category_id)
        .values(category_id=None)
    )
    await db.delete(cat)
    await db.commit()
    return category_id
