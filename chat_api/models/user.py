from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from chat_api.database import Base
import uuid

class User(Base):
    """Registered chat user.

    The friend and pending-request sets are not stored on the row: they are
    projections of the ``friendships`` and ``friend_requests`` tables, which
    keeps both sides of every relation in a single row.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)  # Stored lowercased
    password_hash = Column(String, nullable=False)
    image = Column(String, nullable=True)  # Avatar URL
    last_seen = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Friend relationships
    sent_friend_requests = relationship("FriendRequest", foreign_keys="FriendRequest.requester_id", back_populates="requester", cascade="all, delete-orphan")
    received_friend_requests = relationship("FriendRequest", foreign_keys="FriendRequest.recipient_id", back_populates="recipient", cascade="all, delete-orphan")
    friendships_as_user1 = relationship("Friendship", foreign_keys="Friendship.user1_id", back_populates="user1", cascade="all, delete-orphan")
    friendships_as_user2 = relationship("Friendship", foreign_keys="Friendship.user2_id", back_populates="user2", cascade="all, delete-orphan")

    # Messages
    sent_messages = relationship("Message", foreign_keys="Message.sender_id", back_populates="sender", cascade="all, delete-orphan")
    received_messages = relationship("Message", foreign_keys="Message.recipient_id", back_populates="recipient", cascade="all, delete-orphan")

    @property
    def friend_ids(self) -> set[str]:
        ids = {f.user2_id for f in self.friendships_as_user1}
        ids.update(f.user1_id for f in self.friendships_as_user2)
        return ids

    @property
    def pending_incoming_ids(self) -> set[str]:
        """Users that sent this user a request not yet accepted."""
        return {r.requester_id for r in self.received_friend_requests}

    @property
    def pending_outgoing_ids(self) -> set[str]:
        """Users this user has requested, not yet accepted."""
        return {r.recipient_id for r in self.sent_friend_requests}

    def __repr__(self):
        return f"<User id={self.id} email={self.email} name={self.name}>"
