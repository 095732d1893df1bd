from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from sqlalchemy.orm import Session

from chat_api import crud
from chat_api.config import Settings
from chat_api.dependencies import get_db, get_settings
from chat_api.exceptions import Unauthorized
from chat_api.models import User
from chat_api.security import decode_access_token


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the bearer token issued by /login to a user.

    Args:
        credentials: The HTTP Authorization credentials.
        settings: Application settings holding the signing secret.
        db: The database session.

    Returns:
        User: The user the token was issued to

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired,
            or its user no longer exists
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer authentication is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = decode_access_token(credentials.credentials, settings)
    except Unauthorized as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    db_user = crud.get_user(db, user_id)
    if not db_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return db_user
