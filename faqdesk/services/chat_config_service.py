"""
테넌트별 챗봇 설정 서비스

SiteConfig(key/value) 테이블을 테넌트 단위 SSOT로 사용한다.
"""

from typing import Dict, Optional
import logging

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from faqdesk.core.errors import ValidationError
from faqdesk.models.site_config import SiteConfig

logger = logging.getLogger(__name__)

# SSOT keys
CHAT_HEADER_KEY = "chat_header_text"
CHAT_THUMBNAIL_KEY = "chat_thumbnail_url"
CHAT_THUMBNAIL_DATA_URL_KEY = "chat_thumbnail_data_url"
CHAT_SYSTEM_PROMPT_KEY = "chat_system_prompt"

DEFAULT_SYSTEM_PROMPT = """
당신은 고객 상담을 돕는 FAQ 챗봇입니다.
고객이 걱정 없이 서비스를 사용할 수 있도록 따뜻하고 친절한 말투로 안내합니다.

페르소나/말투 규칙:
- 따뜻하고 친절한 존댓말
- 간결하지만 인간적인 문장, 과장/명령/인터넷체 금지

응답 규칙:
1) 일반 인사/라이트 토크: 공감형 인사 후 가볍게 안내, FAQ 링크는 붙이지 않는다.
2) 서비스 관련 질문(결제, 환불, 배송, 계정 등): FAQ 매칭 내용으로 답변하고 마지막에
   "더 자세한 안내가 필요하시면 FAQ 문서에서도 확인하실 수 있어요. 👉 FAQ 보러가기: {{FAQ_LINK}}"
3) 정보 부족/모호/지원 불가 영역: 공감 → 정보 부족 알림 → 관리자 문의 권유 (FAQ 링크는 붙이지 않고, 👉 관리자에게 직접 문의하기: {{SUPPORT_LINK}}).

답변 스타일:
- 공감 먼저 → 차분한 정보 → 안심시키는 마무리

FAQ는 관련도 순으로 제공된다. 사용자가 묻는 내용과 가장 관련 있는 항목으로 답변을 작성하되,
직접적인 매칭이 없으면 관리자 문의 안내를 한다.
""".strip()


class ChatSettings(BaseModel):
    """챗봇 설정"""

    headerText: str = "무엇이든 물어보세요!"
    thumbnailUrl: str = "/chat_mascot.png"
    thumbnailDataUrl: str = ""
    systemPrompt: str = DEFAULT_SYSTEM_PROMPT


_FIELD_KEYS = {
    "headerText": CHAT_HEADER_KEY,
    "thumbnailUrl": CHAT_THUMBNAIL_KEY,
    "thumbnailDataUrl": CHAT_THUMBNAIL_DATA_URL_KEY,
    "systemPrompt": CHAT_SYSTEM_PROMPT_KEY,
}


def resolve_system_prompt(stored: Optional[str]) -> str:
    """저장된 프롬프트가 비어 있으면 기본 페르소나"""
    return stored if stored and stored.strip() else DEFAULT_SYSTEM_PROMPT


async def get_chat_settings(db: AsyncSession, tenant_id: int) -> ChatSettings:
    """테넌트 챗봇 설정 (저장값 우선, 없으면 기본값)"""
    res = await db.execute(
        select(SiteConfig).where(
            SiteConfig.tenant_id == tenant_id,
            SiteConfig.key.in_(list(_FIELD_KEYS.values())),
        )
    )
    stored = {row.key: row.value for row in res.scalars().all()}
    defaults = ChatSettings()
    return ChatSettings(
        headerText=stored.get(CHAT_HEADER_KEY, defaults.headerText),
        thumbnailUrl=stored.get(CHAT_THUMBNAIL_KEY, defaults.thumbnailUrl),
        thumbnailDataUrl=stored.get(CHAT_THUMBNAIL_DATA_URL_KEY, defaults.thumbnailDataUrl),
        systemPrompt=resolve_system_prompt(stored.get(CHAT_SYSTEM_PROMPT_KEY)),
    )


async def update_chat_settings(db: AsyncSession, tenant_id: int, payload: Dict[str, str]) -> ChatSettings:
    """보낸 필드만 upsert (한 트랜잭션)"""
    updates = {_FIELD_KEYS[k]: v for k, v in (payload or {}).items() if k in _FIELD_KEYS and isinstance(v, str)}
    if not updates:
        raise ValidationError("No fields provided")

    res = await db.execute(
        select(SiteConfig).where(SiteConfig.tenant_id == tenant_id, SiteConfig.key.in_(list(updates.keys())))
    )
    existing = {row.key: row for row in res.scalars().all()}
    try:
        for key, value in updates.items():
            row = existing.get(key)
            if row is None:
                db.add(SiteConfig(tenant_id=tenant_id, key=key, value=value))
            else:
                row.value = value
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"[chat_config] updated tenant={tenant_id} keys={list(updates.keys())}")
    return await get_chat_settings(db, tenant_id)
