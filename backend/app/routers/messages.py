"""Messages 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.middleware.auth_middleware import get_current_user
from app.models.user import User
from app.schemas.message import ConversationOut, MessageOut, MessageSend
from app.services import message_service
from app.services.connection_registry import ConnectionRegistry, get_connection_registry

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/conversations", response_model=List[ConversationOut])
def list_conversations(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return message_service.list_conversations(db, current_user)


@router.post("/send", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    data: MessageSend,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(get_current_user),
):
    return message_service.send_message(db, data, current_user, registry)


@router.get("/{user_id}", response_model=List[MessageOut])
def get_conversation(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return message_service.get_conversation(db, current_user, user_id)
