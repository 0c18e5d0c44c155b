"""
FAQ API

- FAQ 목록/단건 조회, 수동 생성/수정/삭제, 일괄 삭제
- 상담 로그 → FAQ 자동 생성
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from faqdesk.core.config import Settings
from faqdesk.core.errors import FaqDeskError, to_http_exception
from faqdesk.dependencies import get_current_tenant, get_db, get_llm_client, get_settings
from faqdesk.models.tenant import Tenant
from faqdesk.schemas.faq import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    FAQArticleCreate,
    FAQArticleResponse,
    FAQArticleUpdate,
    FAQListResponse,
    GenerateFromLogsRequest,
    GenerateFromLogsResponse,
)
from faqdesk.services import faq_service
from faqdesk.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=FAQListResponse)
async def list_faq_items(
    query: Optional[str] = Query(None, description="제목/본문 검색어"),
    category: Optional[str] = Query(None, description="카테고리명(완전일치)"),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """FAQ 목록 조회"""
    items = await faq_service.list_faqs(db, tenant.id, query=query, category=category)
    return {"items": items}


@router.post("/", response_model=FAQArticleResponse, status_code=201)
async def create_faq_item(
    payload: FAQArticleCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """FAQ 수동 생성"""
    try:
        return await faq_service.create_faq(db, tenant.id, payload)
    except FaqDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[faqs] create failed: {e}")
        raise HTTPException(status_code=500, detail="FAQ 생성에 실패했습니다.")


@router.post("/generate-from-logs", response_model=GenerateFromLogsResponse)
async def generate_from_logs(
    payload: GenerateFromLogsRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    llm: LLMClient = Depends(get_llm_client),
    cfg: Settings = Depends(get_settings),
):
    """상담 로그 → FAQ 생성

    실패 시 항목/개수 없이 실패 단계(stage)만 알려준다.
    """
    logger.info(f"[faqs] generate-from-logs tenant={tenant.id} raw_text_len={len(payload.raw_text or '')}")
    try:
        result = await faq_service.generate_faqs(
            db,
            tenant.id,
            payload.raw_text,
            payload.default_category,
            llm=llm,
            settings=cfg,
        )
    except FaqDeskError as e:
        raise to_http_exception(e)
    return {
        "items": result.items,
        "added_count": result.added_count,
        "skipped_duplicates": result.skipped_duplicates,
        "total_after": result.total_after,
    }


@router.post("/delete-bulk", response_model=BulkDeleteResponse)
async def delete_faq_items_bulk(
    payload: BulkDeleteRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """FAQ 일괄 삭제"""
    try:
        count, ids = await faq_service.delete_faqs_bulk(db, tenant.id, payload.ids)
    except FaqDeskError as e:
        raise to_http_exception(e)
    return {"status": "deleted", "count": count, "ids": ids}


@router.get("/{faq_id}", response_model=FAQArticleResponse)
async def get_faq_item(
    faq_id: int,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """FAQ 단건 조회"""
    try:
        return await faq_service.get_faq(db, tenant.id, faq_id)
    except FaqDeskError as e:
        raise to_http_exception(e)


@router.put("/{faq_id}", response_model=FAQArticleResponse)
async def update_faq_item(
    faq_id: int,
    payload: FAQArticleUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """FAQ 수정"""
    logger.info(f"[faqs] update faq {faq_id} payload keys {sorted(payload.model_fields_set)}")
    try:
        return await faq_service.update_faq(db, tenant.id, faq_id, payload)
    except FaqDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[faqs] update failed: {e}")
        raise HTTPException(status_code=500, detail="FAQ 수정에 실패했습니다.")


@router.delete("/{faq_id}")
async def delete_faq_item(
    faq_id: int,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """FAQ 삭제"""
    try:
        deleted_id = await faq_service.delete_faq(db, tenant.id, faq_id)
    except FaqDeskError as e:
        raise to_http_exception(e)
    return {"status": "deleted", "id": deleted_id}
