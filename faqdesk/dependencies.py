"""
공통 의존성

- 테넌트 결정: ?tenant= 쿼리 → X-Tenant-Key 헤더 → DEFAULT_TENANT_KEY
- LLM 클라이언트/설정은 테스트에서 app.dependency_overrides로 교체한다.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from faqdesk.core.config import Settings, settings
from faqdesk.core.database import get_db
from faqdesk.core.errors import NotFoundError
from faqdesk.models.tenant import Tenant
from faqdesk.services.llm_client import LLMClient
from faqdesk.services.tenant_service import get_tenant_by_key


def get_settings() -> Settings:
    return settings


def get_llm_client(cfg: Settings = Depends(get_settings)) -> LLMClient:
    return LLMClient(cfg)


async def get_current_tenant(
    tenant: Optional[str] = Query(None, description="테넌트 키"),
    x_tenant_key: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    cfg: Settings = Depends(get_settings),
) -> Tenant:
    """요청 테넌트 결정 (없는 키는 404)"""
    key = (tenant or "").strip() or (x_tenant_key or "").strip() or cfg.DEFAULT_TENANT_KEY
    try:
        return await get_tenant_by_key(db, key)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.detail)


__all__ = ["get_db", "get_settings", "get_llm_client", "get_current_tenant"]
