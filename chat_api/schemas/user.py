from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

class RegisterRequest(BaseModel):
    """Schema for registration.

    Only the email is required here: the user store checks it for duplicates
    before it rejects a missing name or password.
    """
    name: Optional[str] = None
    email: EmailStr
    password: Optional[str] = None
    image: Optional[str] = None

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class UserSummary(BaseModel):
    """Public projection of a user used in lists"""
    id: str
    name: str
    email: str
    image: Optional[str] = None

    class Config:
        from_attributes = True

class FriendDetails(UserSummary):
    last_seen: Optional[datetime] = None

class UserWithStatus(UserSummary):
    """Another user annotated with their relationship to the requesting user"""
    has_pending_request: bool = False
    is_friend: bool = False

class UserResponse(UserSummary):
    """Full user record; never includes the password hash"""
    friends: List[str] = []
    pending_incoming: List[str] = []
    pending_outgoing: List[str] = []
    last_seen: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            image=user.image,
            friends=sorted(user.friend_ids),
            pending_incoming=sorted(user.pending_incoming_ids),
            pending_outgoing=sorted(user.pending_outgoing_ids),
            last_seen=user.last_seen,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

class RegisterResponse(BaseModel):
    message: str
    user: UserSummary

class LoginResponse(BaseModel):
    token: str
    user: UserSummary

class LogoutResponse(BaseModel):
    message: str
