"""
faqdesk - FastAPI 메인 애플리케이션
상담 로그 → FAQ 자동 생성, FAQ 검색 기반 챗봇
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from faqdesk.core.config import settings
from faqdesk.core.database import engine, Base, AsyncSessionLocal, check_db_connection
import faqdesk.models  # noqa: F401  (메타데이터 등록)
from faqdesk.services.tenant_service import ensure_tenant

from faqdesk.api.faqs import router as faqs_router
from faqdesk.api.faq_categories import router as faq_categories_router
from faqdesk.api.chatbot import router as chatbot_router
from faqdesk.api.chat_config import router as chat_config_router

# 로깅 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 시 실행되는 이벤트"""
    logger.info("🚀 faqdesk 시작")

    # 데이터베이스 테이블 생성 (개발용)
    if settings.ENVIRONMENT == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("📊 데이터베이스 테이블 생성 완료")

    # 기본 테넌트 시드 (멱등)
    try:
        async with AsyncSessionLocal() as db:
            await ensure_tenant(db, settings.DEFAULT_TENANT_KEY)
    except Exception as e:
        logger.warning(f"기본 테넌트 시드 실패(계속): {e}")

    yield

    await engine.dispose()
    logger.info("👋 faqdesk 종료")


# FastAPI 앱 생성
app = FastAPI(
    title="faqdesk API",
    description="상담 로그 기반 FAQ 생성 + FAQ 검색 챗봇",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

# CORS: 개발 환경에선 프론트 도메인을 명시적으로 허용
DEV_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
ALLOWED_ORIGINS = DEV_ALLOWED_ORIGINS if settings.ENVIRONMENT == "development" else [settings.SITE_BASE_URL.rstrip("/")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(faqs_router, prefix="/faqs", tags=["❓ FAQ"])
app.include_router(faq_categories_router, prefix="/faq-categories", tags=["🗂️ FAQ 카테고리"])
app.include_router(chatbot_router, prefix="/chatbot", tags=["💬 챗봇"])
app.include_router(chat_config_router, prefix="/config", tags=["⚙️ 챗봇 설정"])


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "faqdesk API",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "database": "connected" if await check_db_connection() else "unavailable",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "faqdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True if settings.ENVIRONMENT == "development" else False
    )
