from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lms_quiz.core.config import cfg
from lms_quiz.core.errors import register_error_handlers
from lms_quiz.core.health import router as health_router
from lms_quiz.core.logging import configure_logging
from lms_quiz.db import Base, engine
from lms_quiz.models import quiz as _models  # noqa: F401  (테이블 메타데이터 등록)
from lms_quiz.routers.mocktest import router as mocktest_router
from lms_quiz.routers.quiz import router as quiz_router

log = configure_logging(cfg.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if cfg.CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        log.info("테이블 생성 확인 완료")
    yield


app = FastAPI(title="LMS Quiz & Mock Test", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in cfg.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health_router)
app.include_router(quiz_router, prefix="/api/quizzes", tags=["quiz"])
app.include_router(mocktest_router, prefix="/api/mock-tests", tags=["mock-test"])


def run():
    """로컬 실행: python -m lms_quiz.main 또는 lms-quiz"""
    uvicorn.run(app, host="0.0.0.0", port=cfg.APP_PORT, log_level=cfg.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
