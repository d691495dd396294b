"""Message Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.models.message import Message
from app.models.user import User
from app.schemas.message import MessageSend
from app.services import notification_events
from app.services.connection_registry import ConnectionRegistry
from app.utils.helpers import utcnow


def send_message(
    db: Session, data: MessageSend, current_user: User, registry: Optional[ConnectionRegistry] = None
) -> Message:
    if data.recipient_id == current_user.user_id:
        raise HTTPException(status_code=400, detail="본인에게는 메시지를 보낼 수 없습니다.")
    recipient = db.query(User).filter(User.user_id == data.recipient_id, User.is_active == True).first()  # noqa: E712
    if not recipient:
        raise HTTPException(status_code=404, detail="받는 사람을 찾을 수 없습니다.")
    message = Message(
        sender_id=current_user.user_id,
        recipient_id=recipient.user_id,
        subject=data.subject,
        content=data.content,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    notification_events.notify_new_message(db, registry, recipient.user_id, current_user.full_name, data.subject)
    return message


def get_conversation(db: Session, current_user: User, other_user_id: int) -> List[Message]:
    me = current_user.user_id
    messages = (
        db.query(Message)
        .filter(or_(
            and_(Message.sender_id == me, Message.recipient_id == other_user_id),
            and_(Message.sender_id == other_user_id, Message.recipient_id == me),
        ))
        .order_by(Message.created_at.asc(), Message.message_id.asc())
        .all()
    )
    db.query(Message).filter(
        Message.sender_id == other_user_id,
        Message.recipient_id == me,
        Message.read_at.is_(None),
    ).update({"read_at": utcnow()}, synchronize_session=False)
    db.commit()
    return messages


def list_conversations(db: Session, current_user: User) -> List[dict]:
    me = current_user.user_id
    messages = (
        db.query(Message)
        .filter(or_(Message.sender_id == me, Message.recipient_id == me))
        .order_by(Message.created_at.desc(), Message.message_id.desc())
        .all()
    )
    conversations = {}
    for m in messages:
        other = m.recipient if m.sender_id == me else m.sender
        item = conversations.get(other.user_id)
        if item is None:
            item = {
                "user_id": other.user_id,
                "full_name": other.full_name,
                "role": other.role,
                "last_message": m.content,
                "last_message_at": m.created_at,
                "unread_count": 0,
            }
            conversations[other.user_id] = item
        if m.recipient_id == me and m.read_at is None:
            item["unread_count"] += 1
    return list(conversations.values())
