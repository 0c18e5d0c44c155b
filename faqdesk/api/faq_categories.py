"""
FAQ 카테고리 API

- 카테고리 목록/생성/이름 수정/삭제
- 카테고리는 여기서만 생성된다. (FAQ 자동 생성은 카테고리 행을 만들지 않는다)
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from faqdesk.core.errors import FaqDeskError, to_http_exception
from faqdesk.dependencies import get_current_tenant, get_db
from faqdesk.models.tenant import Tenant
from faqdesk.schemas.faq_category import CategoryListResponse, CategoryResponse, CategoryWrite
from faqdesk.services import category_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=CategoryListResponse)
async def list_faq_categories(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """카테고리 목록 조회"""
    return {"items": await category_service.list_categories(db, tenant.id)}


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_faq_category(
    payload: CategoryWrite,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """카테고리 생성"""
    try:
        return await category_service.create_category(db, tenant.id, payload.name)
    except FaqDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[faq_categories] create failed: {e}")
        raise HTTPException(status_code=500, detail="카테고리 생성에 실패했습니다.")


@router.put("/{category_id}", response_model=CategoryResponse)
async def rename_faq_category(
    category_id: int,
    payload: CategoryWrite,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """카테고리명 수정"""
    try:
        return await category_service.rename_category(db, tenant.id, category_id, payload.name)
    except FaqDeskError as e:
        raise to_http_exception(e)


@router.delete("/{category_id}")
async def delete_faq_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """카테고리 삭제 (연결된 FAQ는 category_id만 해제)"""
    try:
        deleted_id = await category_service.delete_category(db, tenant.id, category_id)
    except FaqDeskError as e:
        raise to_http_exception(e)
    return {"status": "deleted", "id": deleted_id}
