#lms_quiz/schemas/common.py
from typing import Optional
from pydantic import BaseModel

ROLE_ADMIN = "admin"
ROLE_INSTRUCTOR = "instructor"
ROLE_STUDENT = "student"


class User(BaseModel):
    userId: int
    role: str = ROLE_STUDENT
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def can_author(self) -> bool:
        return self.role in (ROLE_INSTRUCTOR, ROLE_ADMIN)


class ErrorResponse(BaseModel):
    error: dict  # {"code": "...", "message": "..."}


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int
