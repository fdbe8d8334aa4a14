# lms_quiz/core/errors.py
"""
퀴즈 엔진 오류 분류
- NotFound / ValidationError / Conflict / Forbidden
- 응답은 항상 {"error": {"code": ..., "message": ...}} 형태
"""
from __future__ import annotations
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class QuizError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return {"error": body}


class NotFound(QuizError):
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(QuizError):
    status_code = 400
    code = "VALIDATION_ERROR"


class Conflict(QuizError):
    status_code = 409
    code = "CONFLICT"


class Forbidden(QuizError):
    status_code = 403
    code = "FORBIDDEN"


def _quiz_error_handler(request: Request, exc: QuizError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # 라우터/의존성에서 detail={"error": {...}} 로 던진 경우 그대로 사용
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        content = detail
    else:
        content = {"error": {"code": "HTTP_ERROR", "message": str(detail)}}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError("Invalid request payload", details=[
        {"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()
    ])
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


def _unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"처리되지 않은 오류: {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuizError, _quiz_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_handler)
