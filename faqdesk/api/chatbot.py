"""
챗봇 API

- 테넌트 FAQ 전체를 검색 대상으로 사용한다 (페이지네이션 없음)
- LLM 실패 시 내부 오류 문구 대신 일반 재시도 안내만 돌려준다
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from faqdesk.core.config import Settings
from faqdesk.core.errors import LlmError
from faqdesk.dependencies import get_current_tenant, get_db, get_llm_client, get_settings
from faqdesk.models.faq import FAQArticle
from faqdesk.models.tenant import Tenant
from faqdesk.schemas.chatbot import ChatbotRequest, ChatbotResponse
from faqdesk.services import chatbot_service
from faqdesk.services.chat_config_service import get_chat_settings
from faqdesk.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

router = APIRouter()

RETRY_MESSAGE = "죄송합니다. 응답이 지연되고 있어요. 잠시 후 다시 시도해 주세요."


@router.post("/", response_model=ChatbotResponse)
async def ask_chatbot(
    payload: ChatbotRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    llm: LLMClient = Depends(get_llm_client),
    cfg: Settings = Depends(get_settings),
):
    """FAQ 기반 챗봇 답변"""
    message = (payload.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="message is required")

    res = await db.execute(
        select(FAQArticle.id, FAQArticle.title, FAQArticle.content, FAQArticle.category)
        .where(FAQArticle.tenant_id == tenant.id)
        .order_by(FAQArticle.id.desc())
    )
    faqs = [dict(row._mapping) for row in res.all()]
    chat_settings = await get_chat_settings(db, tenant.id)

    try:
        answer = await chatbot_service.answer(
            message,
            faqs,
            chat_settings.systemPrompt,
            llm=llm,
            settings=cfg,
        )
    except LlmError as e:
        logger.warning(f"[chatbot] tenant={tenant.id} llm failed status={e.status_code}: {e.detail}")
        raise HTTPException(status_code=e.status_code, detail=RETRY_MESSAGE)
    return {"answer": answer}
