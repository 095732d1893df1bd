from chat_api.database import Base
from chat_api.models.user import User
from chat_api.models.message import Message, MessageType, MessageStatus
from chat_api.models.friend_request import FriendRequest
from chat_api.models.friendship import Friendship

__all__ = [
    "Base", "User", "Message", "MessageType", "MessageStatus",
    "FriendRequest", "Friendship"
]
