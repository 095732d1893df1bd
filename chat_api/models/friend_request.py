from sqlalchemy import Column, String, DateTime, UniqueConstraint, CheckConstraint, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from chat_api.database import Base
import uuid

class FriendRequest(Base):
    """A pending friend request.

    One row is both ``recipient in requester.pending_outgoing`` and
    ``requester in recipient.pending_incoming``. Accepting deletes the row.
    """
    __tablename__ = "friend_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    requester_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    requester = relationship("User", foreign_keys=[requester_id], back_populates="sent_friend_requests")
    recipient = relationship("User", foreign_keys=[recipient_id], back_populates="received_friend_requests")

    # Composite unique constraint to prevent duplicate requests
    __table_args__ = (
        UniqueConstraint('requester_id', 'recipient_id', name='unique_friend_request'),
        CheckConstraint('requester_id <> recipient_id', name='ck_friend_request_not_self'),
    )

    def __repr__(self):
        return f"<FriendRequest id={self.id} requester={self.requester_id} recipient={self.recipient_id}>"
