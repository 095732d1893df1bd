from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, or_
from chat_api.models import Message
from typing import Iterable, List, Optional

def get_message(db: Session, message_id: str) -> Optional[Message]:
    """Get a message by ID."""
    return db.query(Message).filter(Message.id == message_id).first()

def create_message(
    db: Session,
    sender_id: str,
    recipient_id: str,
    message_type: str,
    body: Optional[str] = None,
    attachment_ref: Optional[str] = None,
) -> Message:
    """Create a new message"""
    db_message = Message(
        sender_id=sender_id,
        recipient_id=recipient_id,
        message_type=message_type,
        body=body,
        attachment_ref=attachment_ref,
    )
    db.add(db_message)
    db.commit()
    db.refresh(db_message)
    return db_message

def get_conversation(
    db: Session,
    user_a: str,
    user_b: str,
    page: int = 1,
    page_size: Optional[int] = None,
) -> List[Message]:
    """
    Messages between two users in either direction, oldest first.

    Messages sharing a timestamp are ordered by id. Without ``page_size``
    the whole conversation is returned; otherwise ``page`` (1-based,
    counted from the oldest message) selects a window.
    """
    query = db.query(Message).filter(
        or_(
            and_(Message.sender_id == user_a, Message.recipient_id == user_b),
            and_(Message.sender_id == user_b, Message.recipient_id == user_a),
        )
    ).options(
        joinedload(Message.sender)
    ).order_by(Message.created_at.asc(), Message.id.asc())

    if page_size is not None:
        query = query.offset((page - 1) * page_size).limit(page_size)
    return query.all()

def delete_messages(db: Session, message_ids: Iterable[str]) -> int:
    """Delete messages by id; unknown ids are ignored. Returns the number deleted."""
    ids = set(message_ids)
    if not ids:
        return 0
    deleted = db.query(Message).filter(Message.id.in_(ids)).delete(synchronize_session=False)
    db.commit()
    return deleted
