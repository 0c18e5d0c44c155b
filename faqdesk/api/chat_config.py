"""
챗봇 설정 API (헤더 문구/썸네일/시스템 프롬프트)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from faqdesk.core.errors import FaqDeskError, to_http_exception
from faqdesk.dependencies import get_current_tenant, get_db
from faqdesk.models.tenant import Tenant
from faqdesk.schemas.chatbot import ChatSettingsResponse, ChatSettingsUpdate
from faqdesk.services import chat_config_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/chat", response_model=ChatSettingsResponse)
async def read_chat_settings(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """챗봇 설정 조회"""
    return {"settings": await chat_config_service.get_chat_settings(db, tenant.id)}


@router.put("/chat", response_model=ChatSettingsResponse)
async def save_chat_settings(
    payload: ChatSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    """챗봇 설정 저장 (보낸 필드만)"""
    updates = {}
    for key, value in payload.model_dump(exclude_none=True).items():
        # 썸네일 data URL은 원문 그대로 저장
        updates[key] = value if key == "thumbnailDataUrl" else value.strip()
    try:
        settings = await chat_config_service.update_chat_settings(db, tenant.id, updates)
    except FaqDeskError as e:
        raise to_http_exception(e)
    return {"settings": settings}
