# lms_quiz/core/health.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import time

from lms_quiz.db import get_db, ping

router = APIRouter()
START = time.time()


@router.get("/healthz", tags=["health"])
def healthz(db: Session = Depends(get_db)):
    return {
        "status": "success",
        "message": "ok",
        "data": {
            "uptime": round(time.time() - START, 3),
            "dbReady": ping(db),
        }
    }
