"""
애플리케이션 설정
"""

from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv


"""env 로딩 우선순위
1) OS 환경변수 (배포 대시보드 Environment 등)
2) 프로젝트 루트의 .env (repo/.env)
"""

# .env 사전 로드 (OS 환경변수 우선, override=False)
_here = Path(__file__).resolve()
_repo_root_env = _here.parents[2] / ".env"  # repo/.env
try:
    if _repo_root_env.exists():
        load_dotenv(dotenv_path=str(_repo_root_env), override=False)
except OSError:
    pass


class Settings(BaseSettings):
    """애플리케이션 설정

    프로세스 시작 시 1회 생성해 오케스트레이터에 주입한다.
    (요청 처리 중 os.environ을 직접 읽지 않는다)
    """
    # 환경 설정
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    DATABASE_URL: str = "sqlite+aiosqlite:///./data/faqdesk.db"

    # LLM (OpenAI 호환 chat.completions)
    OPENAI_API_KEY: str | None = None
    OPENAI_ORG_ID: Optional[str] = None
    OPENAI_PROJECT_ID: Optional[str] = None
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_API_BASE: str = "https://api.openai.com/v1"
    LLM_TIMEOUT_MS: int = 15000

    # FAQ 생성: 이 값 미만 confidence 후보는 저장하지 않는다 (0.0 = 모두 저장)
    LLM_CONFIDENCE_THRESHOLD: float = 0.0
    # 카테고리 매핑: 기존 카테고리와의 유사도가 이 값 이상이면 기존 이름으로 수렴
    CATEGORY_MATCH_THRESHOLD: float = 0.4

    # 챗봇 검색(문맥 창)
    RETRIEVAL_LOW_SCORE: float = 0.2
    RETRIEVAL_TOP_K: int = 6
    RETRIEVAL_TOP_K_WIDE: int = 12

    # 링크 치환용
    SITE_BASE_URL: str = "http://localhost:3000"
    SUPPORT_URL: str = "https://example.com/support"

    # 테넌트 미지정 요청이 사용할 기본 키
    DEFAULT_TENANT_KEY: str = "default"

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore'

    @property
    def llm_timeout_seconds(self) -> float:
        return max(0.001, self.LLM_TIMEOUT_MS / 1000.0)

    @property
    def llm_api_base(self) -> str:
        return (self.LLM_API_BASE or "https://api.openai.com/v1").rstrip("/")

    @property
    def faq_link(self) -> str:
        return f"{(self.SITE_BASE_URL or 'http://localhost:3000').rstrip('/')}/docs"


settings = Settings()


# 환경별 설정 검증
def validate_settings(s: Settings = settings):
    """설정 검증"""
    for name in ("LLM_CONFIDENCE_THRESHOLD", "CATEGORY_MATCH_THRESHOLD"):
        value = getattr(s, name)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name}는 0~1 사이여야 합니다: {value}")
    if s.LLM_TIMEOUT_MS <= 0:
        raise ValueError(f"LLM_TIMEOUT_MS는 양수여야 합니다: {s.LLM_TIMEOUT_MS}")
    if s.RETRIEVAL_TOP_K <= 0 or s.RETRIEVAL_TOP_K_WIDE <= 0:
        raise ValueError("RETRIEVAL_TOP_K / RETRIEVAL_TOP_K_WIDE는 양수여야 합니다.")

    if s.ENVIRONMENT == "production":
        if not s.OPENAI_API_KEY:
            raise ValueError("프로덕션 환경에서는 OPENAI_API_KEY가 필요합니다.")

    return True


# 설정 검증 실행
validate_settings()
