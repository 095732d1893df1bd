from sqlalchemy import Column, String, DateTime, ForeignKey, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship
from chat_api.database import Base
from datetime import datetime, timezone
import enum
import uuid


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"


class MessageStatus(str, enum.Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


def utcnow() -> datetime:
    """Naive UTC timestamp with microseconds; stored the same on SQLite and PostgreSQL."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Message(Base):
    """Direct message between two users.

    ``message_type`` decides the payload: text messages carry ``body``,
    image messages carry ``attachment_ref``. Never both.
    """
    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    sender_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message_type = Column(String(10), nullable=False)  # 'text' or 'image'
    body = Column(Text, nullable=True)
    attachment_ref = Column(String, nullable=True)  # Public path of the stored image
    status = Column(String(10), nullable=False, default=MessageStatus.SENT.value)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id], back_populates="sent_messages")
    recipient = relationship("User", foreign_keys=[recipient_id], back_populates="received_messages")

    __table_args__ = (
        CheckConstraint(
            "(message_type = 'text' AND body IS NOT NULL AND attachment_ref IS NULL) OR "
            "(message_type = 'image' AND attachment_ref IS NOT NULL AND body IS NULL)",
            name="ck_messages_payload_matches_type",
        ),
        CheckConstraint("status IN ('sent', 'delivered', 'read')", name="ck_messages_status"),
        Index("ix_messages_sender_recipient", "sender_id", "recipient_id"),
    )

    def __repr__(self):
        return f"<Message id={self.id} sender={self.sender_id} recipient={self.recipient_id} type={self.message_type}>"
