"""
테넌트(채널) 모델

- FAQ/카테고리/챗봇 설정은 모두 tenant_id로 분리된다.
- 다른 테넌트의 데이터는 조회/수정/삭제 대상이 될 수 없다.
"""

from sqlalchemy import Column, String, Integer, DateTime, func

from faqdesk.core.database import Base


class Tenant(Base):
    """테넌트"""

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, key={self.key})>"
