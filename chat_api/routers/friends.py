from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from chat_api.dependencies import get_db
from chat_api.crud.friends import FriendsCRUD
from chat_api.exceptions import ChatAPIError
from chat_api.schemas.friends import FriendRequestCreate, FriendRequestStatusResponse
from chat_api.schemas.user import FriendDetails, UserSummary
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["friends"])

@router.post("/friend-request", response_model=FriendRequestStatusResponse)
async def send_friend_request(
    request: FriendRequestCreate,
    db: Session = Depends(get_db)
):
    """Send a friend request"""
    try:
        FriendsCRUD.send_friend_request(db, request.sender_id, request.recipient_id)
        return FriendRequestStatusResponse(
            success=True,
            message="Friend request sent successfully"
        )
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error in send_friend_request: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/friend-request/accept", response_model=FriendRequestStatusResponse)
async def accept_friend_request(
    request: FriendRequestCreate,
    db: Session = Depends(get_db)
):
    """Accept the friend request ``sender_id`` sent to ``recipient_id``"""
    try:
        FriendsCRUD.accept_friend_request(db, request.sender_id, request.recipient_id)
        return FriendRequestStatusResponse(
            success=True,
            message="Friend Request accepted successfully"
        )
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error in accept_friend_request: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/friend-request/{user_id}", response_model=List[UserSummary])
async def get_friend_requests(user_id: str, db: Session = Depends(get_db)):
    """Users with a pending request to ``user_id``"""
    try:
        requesters = FriendsCRUD.get_friend_requests(db, user_id)
        return [UserSummary.model_validate(u) for u in requesters]
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error in get_friend_requests: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/friend-requests/sent/{user_id}", response_model=List[UserSummary])
async def get_sent_friend_requests(user_id: str, db: Session = Depends(get_db)):
    """Users ``user_id`` has sent a pending request to"""
    try:
        recipients = FriendsCRUD.get_sent_friend_requests(db, user_id)
        return [UserSummary.model_validate(u) for u in recipients]
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error in get_sent_friend_requests: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/accepted-friends/{user_id}", response_model=List[UserSummary])
async def get_accepted_friends(user_id: str, db: Session = Depends(get_db)):
    try:
        friends = FriendsCRUD.get_friends_list(db, user_id)
        return [UserSummary.model_validate(u) for u in friends]
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error in get_accepted_friends: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/friends/{user_id}", response_model=List[str])
async def get_friend_ids(user_id: str, db: Session = Depends(get_db)):
    """IDs of the friends of ``user_id``"""
    try:
        return FriendsCRUD.get_friend_ids(db, user_id)
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error in get_friend_ids: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/friends-with-details/{user_id}", response_model=List[FriendDetails])
async def get_friends_with_details(user_id: str, db: Session = Depends(get_db)):
    """Friends of ``user_id`` including when they were last seen"""
    try:
        friends = FriendsCRUD.get_friends_list(db, user_id)
        return [FriendDetails.model_validate(u) for u in friends]
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error in get_friends_with_details: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
