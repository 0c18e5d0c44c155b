"""
테넌트 서비스
"""

from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from faqdesk.core.errors import NotFoundError
from faqdesk.models.tenant import Tenant

logger = logging.getLogger(__name__)


async def get_tenant_by_key(db: AsyncSession, key: str) -> Tenant:
    """키로 테넌트 조회"""
    res = await db.execute(select(Tenant).where(Tenant.key == key))
    tenant = res.scalar_one_or_none()
    if tenant is None:
        raise NotFoundError("Tenant not found")
    return tenant


async def ensure_tenant(db: AsyncSession, key: str, name: Optional[str] = None) -> Tenant:
    """테넌트가 없으면 생성 (멱등)"""
    res = await db.execute(select(Tenant).where(Tenant.key == key))
    tenant = res.scalar_one_or_none()
    if tenant is not None:
        return tenant
    tenant = Tenant(key=key, name=name or key)
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    logger.info(f"[tenant] created key={key} id={tenant.id}")
    return tenant
