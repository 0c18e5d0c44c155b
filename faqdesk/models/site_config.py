"""
테넌트별 설정(Key-Value) 모델

- 챗봇 헤더 문구/썸네일/시스템 프롬프트를 테넌트 단위로 저장한다.
- (tenant_id, key)는 unique로 강제해 동일 설정이 중복 생성되지 않도록 한다.
"""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint, func

from faqdesk.core.database import Base


class SiteConfig(Base):
    """테넌트 설정(Key-Value)"""

    __tablename__ = "site_configs"
    __table_args__ = (UniqueConstraint("tenant_id", "key", name="uq_site_configs_tenant_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    key = Column(String(100), nullable=False)
    value = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<SiteConfig(tenant_id={self.tenant_id}, key={self.key})>"
