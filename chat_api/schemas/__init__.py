from chat_api.schemas.user import (
    RegisterRequest, LoginRequest, UserSummary, FriendDetails, UserWithStatus, UserResponse,
    RegisterResponse, LoginResponse, LogoutResponse
)
from chat_api.schemas.message import Message, SenderSummary, DeleteMessagesRequest, DeleteMessagesResponse
from chat_api.schemas.friends import FriendRequestCreate, FriendRequestStatusResponse

__all__ = [
    "RegisterRequest", "LoginRequest", "UserSummary", "FriendDetails", "UserWithStatus", "UserResponse",
    "RegisterResponse", "LoginResponse", "LogoutResponse",
    "Message", "SenderSummary", "DeleteMessagesRequest", "DeleteMessagesResponse",
    "FriendRequestCreate", "FriendRequestStatusResponse"
]
