from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from app.database import get_db, get_session_factory
from app.models.user import User
from app.config import settings

security = HTTPBearer()

ALGORITHM = "HS256"


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _user_from_token(db: Session, token: str) -> User:
    payload = decode_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = db.query(User).filter(User.user_id == int(user_id), User.is_active == True).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    return _user_from_token(db, credentials.credentials)


@dataclass(frozen=True)
class StreamUser:
    user_id: int
    role: str


def get_stream_user(
    token: Optional[str] = Query(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
    session_factory=Depends(get_session_factory),
) -> StreamUser:
    # EventSource는 헤더를 붙일 수 없으므로 ?token= 도 허용한다.
    raw = credentials.credentials if credentials is not None else token
    if not raw:
        raise HTTPException(status_code=401, detail="Access token required")
    # 스트림은 오래 열려 있으므로 인증 조회용 세션은 응답 전에 반납한다.
    db = session_factory()
    try:
        user = _user_from_token(db, raw)
        return StreamUser(user_id=user.user_id, role=user.role)
    finally:
        db.close()


def require_roles(*roles: str):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(roles)}",
            )
        return current_user
    return checker
