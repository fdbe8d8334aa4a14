# lms_quiz/db.py
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from lms_quiz.core.config import cfg

# Base 클래스
Base = declarative_base()


def _connect_args(url: str) -> dict:
    # SQLite 는 스레드풀(동기 엔드포인트)에서 같은 커넥션을 넘겨 쓸 수 있어야 함
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    cfg.DATABASE_URL,
    pool_pre_ping=True,
    pool_recycle=3600,
    connect_args=_connect_args(cfg.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    여러 행을 쓰는 작업(퀴즈 생성/삭제, 응시 제출)을 하나의 트랜잭션으로 묶는다.
    예외가 나면 전부 롤백한 뒤 그대로 다시 던진다. 부분 저장 상태는 남지 않는다.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def ping(db: Session) -> bool:
    return db.execute(text("SELECT 1")).scalar_one() == 1
