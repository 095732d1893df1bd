from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

class SenderSummary(BaseModel):
    id: str
    name: str
    image: Optional[str] = None

    class Config:
        from_attributes = True

class Message(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    message_type: str
    body: Optional[str] = None
    attachment_ref: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    sender: Optional[SenderSummary] = None

    class Config:
        from_attributes = True

class DeleteMessagesRequest(BaseModel):
    messages: List[str] = Field(..., description="IDs of the messages to delete")

class DeleteMessagesResponse(BaseModel):
    message: str
    deleted_count: int
