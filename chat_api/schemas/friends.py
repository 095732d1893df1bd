from pydantic import AliasChoices, BaseModel, Field

class FriendRequestCreate(BaseModel):
    """Body of both send and accept; camelCase names from the mobile client are accepted"""
    sender_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("sender_id", "senderId"),
        description="User sending (or who sent) the request",
    )
    recipient_id: str = Field(
        ...,
        min_length=1,
        # "recepientId" is what older app builds send
        validation_alias=AliasChoices("recipient_id", "recipientId", "recepientId"),
        description="User receiving the request",
    )

class FriendRequestStatusResponse(BaseModel):
    success: bool
    message: str
