import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def getenv_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "y", "on")


def getenv_int(key: str, default: int) -> int:
    v = os.getenv(key)
    try:
        return int(v) if v is not None else default
    except Exception:
        return default


@dataclass(frozen=True)
class Config:
    # DB
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./lms_quiz.db")
    CREATE_TABLES: bool = getenv_bool("CREATE_TABLES", True)  # 스키마 관리 도구가 없을 때만

    # Auth (토큰 검증만, 발급은 auth 서비스 담당)
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    JWT_PUBLIC_KEY: str = os.getenv("JWT_PUBLIC_KEY", "")

    # Pagination
    DEFAULT_PAGE_SIZE: int = getenv_int("DEFAULT_PAGE_SIZE", 10)
    MAX_PAGE_SIZE: int = getenv_int("MAX_PAGE_SIZE", 100)

    # Quiz engine
    DEDUPE_SUBMISSIONS: bool = getenv_bool("DEDUPE_SUBMISSIONS", True)
    LOCK_QUESTIONS_AFTER_ATTEMPTS: bool = getenv_bool("LOCK_QUESTIONS_AFTER_ATTEMPTS", True)

    # 텍스트 문항 가져오기 기본값
    IMPORT_DEFAULT_TIME_LIMIT: int = getenv_int("IMPORT_DEFAULT_TIME_LIMIT", 60)      # 분
    IMPORT_DEFAULT_PASSING_SCORE: int = getenv_int("IMPORT_DEFAULT_PASSING_SCORE", 70)  # %

    # Server
    APP_ENV: str = os.getenv("APP_ENV", "dev")
    APP_PORT: int = getenv_int("APP_PORT", 8000)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")


cfg = Config()
