from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from chat_api import crud, schemas
from chat_api.auth import get_current_user
from chat_api.config import Settings
from chat_api.crud.friends import FriendsCRUD
from chat_api.dependencies import get_db, get_settings
from chat_api.exceptions import ChatAPIError
from chat_api.models import User
from chat_api.security import create_access_token
from chat_api.utils.logger import get_logger

router = APIRouter(
    tags=["users"],
    responses={404: {"description": "Not found"}}
)

logger = get_logger(__name__)


@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: schemas.RegisterRequest,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    """Register a new user"""
    try:
        db_user = crud.create_user(
            db,
            name=body.name,
            email=body.email,
            password=body.password,
            image=body.image,
            password_min_length=settings.PASSWORD_MIN_LENGTH,
        )
        return schemas.RegisterResponse(
            message="User registered successfully",
            user=schemas.UserSummary.model_validate(db_user),
        )
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Registration error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/login", response_model=schemas.LoginResponse)
async def login(
    body: schemas.LoginRequest,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    """Exchange email and password for a one-hour access token"""
    try:
        db_user = crud.authenticate_user(db, body.email, body.password)
        token = create_access_token(db_user.id, settings)
        logger.info(f"User {db_user.id} logged in")
        return schemas.LoginResponse(
            token=token,
            user=schemas.UserSummary.model_validate(db_user),
        )
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/logout", response_model=schemas.LogoutResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """
    Tokens are stateless, so logging out only confirms the token was valid;
    the client discards it.
    """
    logger.info(f"User {current_user.id} logged out")
    return schemas.LogoutResponse(message="Logged out successfully")


@router.get("/users/{user_id}", response_model=List[schemas.UserWithStatus])
async def get_other_users(user_id: str, db: Session = Depends(get_db)):
    """All users except ``user_id``, flagged with pending-request and friend status"""
    try:
        rows = FriendsCRUD.get_other_users_with_status(db, user_id)
        return [
            schemas.UserWithStatus(
                id=other.id,
                name=other.name,
                email=other.email,
                image=other.image,
                has_pending_request=has_pending_request,
                is_friend=is_friend,
            )
            for other, has_pending_request, is_friend in rows
        ]
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error retrieving users: {e}")
        raise HTTPException(status_code=500, detail="Error retrieving users")


@router.get("/user/{user_id}", response_model=schemas.UserResponse)
async def get_user_details(user_id: str, db: Session = Depends(get_db)):
    """Full record of one user"""
    try:
        db_user = crud.require_user(db, user_id)
        return schemas.UserResponse.from_user(db_user)
    except (HTTPException, ChatAPIError):
        raise
    except Exception as e:
        logger.error(f"Error fetching user: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
