"""Permissions 관련 공용 유틸리티 헬퍼입니다."""

from app.models.user import User


STUDENT = "student"
COMPANY = "company"
ADMIN = "admin"


def is_admin(user: User) -> bool:
    return user.role == ADMIN
