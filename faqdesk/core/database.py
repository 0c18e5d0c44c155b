"""
데이터베이스 설정 및 연결
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import MetaData, types
from typing import AsyncGenerator
from pathlib import Path
import logging
import ssl
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from faqdesk.core.config import settings

logger = logging.getLogger(__name__)


# SQLite와 PostgreSQL 모두 지원하는 JSON 타입
class JSON(types.TypeDecorator):
    """Platform-independent JSON type."""
    impl = types.JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import JSONB
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(types.JSON())


def _postgres_engine_args(raw_url: str) -> tuple[str, dict]:
    """postgres URL을 asyncpg용으로 변환하고 sslmode를 connect_args로 옮긴다.

    asyncpg는 URL query의 sslmode를 받지 않는다("unexpected keyword argument").
    """
    _raw_url = raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    _parts = urlsplit(_raw_url)
    _query_items = parse_qsl(_parts.query, keep_blank_values=True)
    _sslmode = next((v for (k, v) in _query_items if k.lower() == "sslmode"), None)
    _query_filtered = [(k, v) for (k, v) in _query_items if k.lower() not in ("sslmode", "ssl")]
    _engine_url = urlunsplit((_parts.scheme, _parts.netloc, _parts.path, urlencode(_query_filtered), _parts.fragment))

    _connect_args = {}
    if _sslmode is not None:
        v = str(_sslmode).strip().lower()
        # libpq sslmode semantics:
        # - require/prefer: encrypt but DO NOT verify server cert by default
        # - verify-ca/verify-full: verify
        if v in ("require", "prefer", "verify-ca", "verify-full"):
            ctx = ssl.create_default_context()
            if v in ("require", "prefer"):
                ctx.check_hostname = False
                ctx.verify_mode = ssl.CERT_NONE
            _connect_args["ssl"] = ctx
    return _engine_url, _connect_args


def create_engine_from_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """DATABASE_URL로 비동기 엔진 생성 (SQLite / PostgreSQL)"""
    if database_url.startswith("sqlite"):
        # 드라이버 미지정 URL은 aiosqlite로 보정
        if database_url.startswith("sqlite://"):
            database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        _db_path = database_url.split(":///", 1)[-1]
        if _db_path and _db_path != ":memory:" and ":///" in database_url:
            Path(_db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_async_engine(database_url, echo=echo, future=True)

    engine_url, connect_args = _postgres_engine_args(database_url)
    return create_async_engine(
        engine_url,
        echo=echo,
        future=True,
        pool_pre_ping=True,
        pool_recycle=300,
        connect_args=connect_args,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """세션 팩토리 생성"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


# SQLAlchemy 비동기 엔진 생성
engine = create_engine_from_url(settings.DATABASE_URL, echo=settings.DEBUG)

# 세션 팩토리 생성
AsyncSessionLocal = create_session_factory(engine)


# Base 클래스 정의
class Base(DeclarativeBase):
    """SQLAlchemy Base 클래스"""
    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )


# 데이터베이스 세션 의존성
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """데이터베이스 세션 의존성"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# 데이터베이스 연결 테스트
async def check_db_connection() -> bool:
    """데이터베이스 연결 테스트"""
    try:
        async with engine.begin() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return True
    except Exception as e:
        logger.warning(f"데이터베이스 연결 실패: {e}")
        return False
