from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional
import uuid

from sqlalchemy.orm import Session

from chat_api import crud
from chat_api.exceptions import InternalError, NotFound, ValidationFailed
from chat_api.models import Message, MessageType
from chat_api.services.storage import LocalFileStorage
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


@dataclass
class Attachment:
    """Uploaded image handed to the messaging engine."""
    data: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


def _is_well_formed_id(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def send_message(
    db: Session,
    storage: LocalFileStorage,
    sender_id: str,
    recipient_id: str,
    message_type: str,
    body: Optional[str] = None,
    attachment: Optional[Attachment] = None,
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> Message:
    """
    Validate and persist a direct message.

    Checks run in a fixed order and the first failure wins: ids well formed,
    both users exist, known message type, non-blank text for text messages,
    an image payload for image messages. Image bytes go to blob storage
    before the message row is written; if the write fails the blob is
    removed again.
    """
    if not _is_well_formed_id(sender_id) or not _is_well_formed_id(recipient_id):
        raise ValidationFailed("Invalid user IDs provided")

    if crud.get_user(db, sender_id) is None:
        raise NotFound("Sender not found")
    if crud.get_user(db, recipient_id) is None:
        raise NotFound("Recipient not found")

    try:
        kind = MessageType(message_type)
    except ValueError:
        raise ValidationFailed("Invalid message type")

    if kind is MessageType.TEXT:
        text = (body or "").strip()
        if not text:
            raise ValidationFailed("Message text cannot be empty for text messages")
        message = crud.create_message(db, sender_id, recipient_id, kind.value, body=text)
        logger.info(f"Text message {message.id} sent: {sender_id} -> {recipient_id}")
        return message

    if attachment is None or not attachment.data:
        raise ValidationFailed("Image file is required for image messages")
    if not (attachment.content_type or "").startswith("image/"):
        raise ValidationFailed("Only image files are allowed!")
    if len(attachment.data) > max_upload_bytes:
        raise ValidationFailed(f"Image exceeds the {max_upload_bytes} byte limit")

    try:
        attachment_ref = storage.save(attachment.data, attachment.filename)
    except OSError as e:
        logger.error(f"Failed to store image from {sender_id}: {e}")
        raise InternalError("Failed to store image")
    try:
        message = crud.create_message(db, sender_id, recipient_id, kind.value, attachment_ref=attachment_ref)
    except Exception:
        db.rollback()
        _discard_blob(storage, attachment_ref)
        raise
    logger.info(f"Image message {message.id} sent: {sender_id} -> {recipient_id}")
    return message


def _discard_blob(storage: LocalFileStorage, attachment_ref: str) -> None:
    """Best-effort removal of a blob whose message was never stored."""
    try:
        storage.delete(attachment_ref)
    except Exception as e:
        logger.error(f"Failed to clean up orphaned blob {attachment_ref}: {e}")


def get_conversation(
    db: Session,
    user_a: str,
    user_b: str,
    page: int = 1,
    page_size: Optional[int] = None,
) -> List[Message]:
    """Messages between two users, oldest first, each with its sender loaded."""
    return crud.get_conversation(db, user_a, user_b, page=page, page_size=page_size)


def delete_messages(db: Session, message_ids: Iterable[str]) -> int:
    """
    Delete messages by id and return how many existed.

    Raises:
        ValidationFailed: if no ids are given
    """
    ids = {str(message_id) for message_id in message_ids}
    if not ids:
        raise ValidationFailed("Invalid request body")
    deleted = crud.delete_messages(db, ids)
    logger.info(f"Deleted {deleted} of {len(ids)} requested messages")
    return deleted
