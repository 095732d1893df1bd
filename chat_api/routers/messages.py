from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from chat_api import schemas
from chat_api.config import Settings
from chat_api.dependencies import get_db, get_settings, get_storage, get_optional_request_id
from chat_api.exceptions import ChatAPIError, ValidationFailed
from chat_api.services import messaging
from chat_api.services.storage import LocalFileStorage
from chat_api.utils.logger import get_logger

router = APIRouter(
    tags=["messages"],
    responses={404: {"description": "Not found"}}
)

logger = get_logger(__name__)


@router.post("/messages", response_model=schemas.Message, status_code=status.HTTP_201_CREATED)
async def send_message(
    sender_id: Optional[str] = Form(None, alias="senderId"),
    recipient_id: Optional[str] = Form(None, alias="recipientId"),
    message_type: Optional[str] = Form(None, alias="messageType"),
    message_text: Optional[str] = Form(None, alias="messageText"),
    image_file: Optional[UploadFile] = File(None, alias="imageFile"),
    settings: Settings = Depends(get_settings),
    storage: LocalFileStorage = Depends(get_storage),
    request_id: Optional[str] = Depends(get_optional_request_id),
    db: Session = Depends(get_db),
):
    """
    Send a text or image message.

    Multipart form with ``senderId``, ``recipientId``, ``messageType``
    (``text`` or ``image``), ``messageText`` for text and an ``imageFile``
    upload for images.
    """
    try:
        if not sender_id or not recipient_id or not message_type:
            raise ValidationFailed("senderId, recipientId and messageType are required")

        attachment = None
        if image_file is not None and message_type == "image":
            # Read one byte past the limit so oversized uploads are rejected without buffering them whole
            data = await image_file.read(settings.MAX_UPLOAD_BYTES + 1)
            attachment = messaging.Attachment(
                data=data,
                filename=image_file.filename,
                content_type=image_file.content_type,
            )

        message = messaging.send_message(
            db,
            storage,
            sender_id=sender_id,
            recipient_id=recipient_id,
            message_type=message_type,
            body=message_text,
            attachment=attachment,
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
        )
        return schemas.Message.model_validate(message)
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Message sending error: {e}", request_id=request_id)
        raise HTTPException(status_code=500, detail="Internal Server Error")
    finally:
        if image_file is not None:
            await image_file.close()


@router.get("/messages/{sender_id}/{recipient_id}", response_model=List[schemas.Message])
async def get_conversation(
    sender_id: str,
    recipient_id: str,
    page: int = Query(1, ge=1, description="Page number, counted from the oldest message"),
    page_size: Optional[int] = Query(None, ge=1, le=500, description="Messages per page; omit for the whole conversation"),
    db: Session = Depends(get_db),
):
    """Messages between two users in either direction, oldest first"""
    try:
        messages = messaging.get_conversation(db, sender_id, recipient_id, page=page, page_size=page_size)
        return [schemas.Message.model_validate(m) for m in messages]
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error fetching messages: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post("/deleteMessages", response_model=schemas.DeleteMessagesResponse)
async def delete_messages(body: schemas.DeleteMessagesRequest, db: Session = Depends(get_db)):
    """Delete messages by id; ids that do not exist are ignored"""
    try:
        deleted = messaging.delete_messages(db, body.messages)
        return schemas.DeleteMessagesResponse(
            message="Messages deleted successfully",
            deleted_count=deleted,
        )
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error deleting messages: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
