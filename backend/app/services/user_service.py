"""User Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import ProfileUpdate


def list_users(db: Session, role: Optional[str] = None, include_inactive: bool = False) -> List[User]:
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if not include_inactive:
        q = q.filter(User.is_active == True)  # noqa: E712
    return q.order_by(User.user_id).all()


def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(user, k, v)
    db.commit()
    db.refresh(user)
    return user
