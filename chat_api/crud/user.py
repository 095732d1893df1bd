from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from chat_api.exceptions import DuplicateEmail, NotFound, Unauthorized, ValidationFailed
from chat_api.models import User, FriendRequest, Friendship
from chat_api.models.message import utcnow
from chat_api.security import hash_password, verify_password
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PASSWORD_MIN_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def require_user(db: Session, user_id: str) -> User:
    """Get a user by ID or raise NotFound."""
    user = get_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get a user by email (case-insensitive)."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    image: Optional[str] = None,
    password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH,
) -> User:
    """
    Create a new user.

    The email check runs before any other validation, so a used email is
    always reported as DuplicateEmail. The unique index catches the race
    between the check and the insert.

    Raises:
        DuplicateEmail: if the email is already registered
        ValidationFailed: if name or email is blank or the password is too short
    """
    email = normalize_email(email or "")
    if email and get_user_by_email(db, email):
        raise DuplicateEmail()

    name = (name or "").strip()
    if not name or not email or not password:
        raise ValidationFailed("All fields are required")
    if len(password) < password_min_length:
        raise ValidationFailed(f"Password must be at least {password_min_length} characters")

    db_user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        image=image or None,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmail()
    db.refresh(db_user)
    logger.info(f"Registered user {db_user.id}")
    return db_user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Check credentials and record the login time.

    Raises:
        NotFound: if no user has this email
        Unauthorized: if the password does not match
    """
    db_user = get_user_by_email(db, email)
    if not db_user:
        raise NotFound("User not found")
    if not verify_password(db_user.password_hash, password):
        raise Unauthorized("Invalid credentials")
    db_user.last_seen = utcnow()
    db.commit()
    db.refresh(db_user)
    return db_user


def get_other_users(db: Session, user_id: str) -> List[User]:
    """Every user except ``user_id``, oldest account first."""
    return db.query(User).filter(User.id != user_id).order_by(User.created_at, User.id).all()


@dataclass
class FriendListMutation:
    """Changes to one user's friend and pending-request sets."""
    add_friends: set[str] = field(default_factory=set)
    remove_friends: set[str] = field(default_factory=set)
    add_incoming: set[str] = field(default_factory=set)
    remove_incoming: set[str] = field(default_factory=set)
    add_outgoing: set[str] = field(default_factory=set)
    remove_outgoing: set[str] = field(default_factory=set)


def _friendship_query(db: Session, a: str, b: str):
    user1_id, user2_id = Friendship.ordered_pair(a, b)
    return db.query(Friendship).filter(
        Friendship.user1_id == user1_id,
        Friendship.user2_id == user2_id,
    )


def _request_query(db: Session, requester_id: str, recipient_id: str):
    return db.query(FriendRequest).filter(
        FriendRequest.requester_id == requester_id,
        FriendRequest.recipient_id == recipient_id,
    )


def update_friend_lists(db: Session, user_id: str, mutation: FriendListMutation) -> None:
    """
    Apply ``mutation`` to one user's relationship sets inside the current transaction.

    Removals run before additions. Every addition is "add if absent" and every
    removal "remove if present", so applying the same mutation twice is a no-op.
    The caller commits; a concurrent insert of the same pair surfaces as an
    IntegrityError on commit through the unique constraints.
    """
    for other_id in mutation.remove_friends:
        _friendship_query(db, user_id, other_id).delete(synchronize_session=False)
    for other_id in mutation.remove_incoming:
        _request_query(db, other_id, user_id).delete(synchronize_session=False)
    for other_id in mutation.remove_outgoing:
        _request_query(db, user_id, other_id).delete(synchronize_session=False)

    for other_id in mutation.add_friends:
        if _friendship_query(db, user_id, other_id).first() is None:
            user1_id, user2_id = Friendship.ordered_pair(user_id, other_id)
            db.add(Friendship(user1_id=user1_id, user2_id=user2_id))
    for other_id in mutation.add_incoming:
        if _request_query(db, other_id, user_id).first() is None:
            db.add(FriendRequest(requester_id=other_id, recipient_id=user_id))
    for other_id in mutation.add_outgoing:
        if _request_query(db, user_id, other_id).first() is None:
            db.add(FriendRequest(requester_id=user_id, recipient_id=other_id))

    db.flush()
    # Loaded relationship collections no longer match the tables
    db.expire_all()
