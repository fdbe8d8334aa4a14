# lms_quiz/deps.py
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException, Request

from lms_quiz.core.config import cfg
from lms_quiz.schemas.common import ROLE_STUDENT, User


def _decode_jwt(token: str) -> dict:
    try:
        if cfg.JWT_ALGORITHM.startswith("HS"):
            if not cfg.JWT_SECRET:
                raise HTTPException(500, detail={"error": {"message": "JWT_SECRET not set"}})
            return jwt.decode(token, cfg.JWT_SECRET, algorithms=[cfg.JWT_ALGORITHM])
        if cfg.JWT_ALGORITHM.startswith("RS"):
            if not cfg.JWT_PUBLIC_KEY:
                raise HTTPException(500, detail={"error": {"message": "JWT_PUBLIC_KEY not set"}})
            return jwt.decode(token, cfg.JWT_PUBLIC_KEY, algorithms=[cfg.JWT_ALGORITHM])
        raise HTTPException(500, detail={"error": {"message": f"Unsupported alg: {cfg.JWT_ALGORITHM}"}})
    except jwt.ExpiredSignatureError:
        raise HTTPException(401, detail={"error": {"code": "TOKEN_EXPIRED", "message": "Token expired"}})
    except jwt.InvalidTokenError:
        raise HTTPException(401, detail={"error": {"code": "INVALID_TOKEN", "message": "Invalid token"}})


def _resolve_user(
        authorization: Optional[str],
        x_user_id: Optional[str],
        x_user_role: Optional[str],
) -> Optional[User]:
    if authorization:
        if not authorization.startswith("Bearer "):
            raise HTTPException(401, detail={"error": {"code": "UNAUTHORIZED", "message": "No token provided"}})
        payload = _decode_jwt(authorization.split(" ", 1)[1].strip())
        try:
            return User(
                userId=int(payload["userId"]),
                role=payload.get("role") or ROLE_STUDENT,
                email=payload.get("email"),
            )
        except Exception:
            raise HTTPException(401, detail={"error": {"code": "INVALID_CLAIMS", "message": "Invalid token claims"}})

    # 게이트웨이(백엔드)가 전달한 헤더 허용
    if x_user_id:
        try:
            uid = int(x_user_id)
        except ValueError:
            raise HTTPException(401, detail={"error": {"code": "INVALID_X_USER_ID", "message": "Invalid X-User-Id"}})
        return User(userId=uid, role=x_user_role or ROLE_STUDENT)

    return None


def get_optional_user(
        Authorization: Optional[str] = Header(None, alias="Authorization"),
        x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
        x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
) -> Optional[User]:
    """
    로그인 선택 엔드포인트용 (응시 제출/결과 조회, 퀴즈 화면).
    자격 증명이 없으면 None(비로그인). 있는데 잘못됐으면 401.
    """
    return _resolve_user(Authorization, x_user_id, x_user_role)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(401, detail={"error": {"code": "UNAUTHORIZED", "message": "No token provided"}})
    return user


def require_instructor(user: User = Depends(get_current_user)) -> User:
    """출제/통계: instructor 또는 admin"""
    if not user.can_author:
        raise HTTPException(403, detail={"error": {"code": "FORBIDDEN", "message": "Requires instructor role"}})
    return user


def get_client_host(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
