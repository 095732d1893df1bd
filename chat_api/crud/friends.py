from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import and_, or_
from typing import List, Tuple
from chat_api.crud.user import FriendListMutation, require_user, get_other_users, update_friend_lists
from chat_api.exceptions import AlreadyFriends, AlreadyRequested, NotFound, ValidationFailed
from chat_api.models.friend_request import FriendRequest
from chat_api.models.friendship import Friendship
from chat_api.models.user import User
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)

class FriendsCRUD:
    """Friend-request state machine: none -> requested -> friends.

    Each transition runs in one transaction. There is no reject or cancel.
    """

    @staticmethod
    def send_friend_request(db: Session, sender_id: str, recipient_id: str) -> FriendRequest:
        """Send a friend request from ``sender_id`` to ``recipient_id``."""
        if sender_id == recipient_id:
            raise ValidationFailed("Cannot send a friend request to yourself")

        sender = db.query(User).filter(User.id == sender_id).first()
        recipient = db.query(User).filter(User.id == recipient_id).first()
        if not sender or not recipient:
            raise NotFound("User not found")

        # A pending request in either direction blocks a new one
        if FriendsCRUD._pending_between(db, sender_id, recipient_id) is not None:
            raise AlreadyRequested()

        if FriendsCRUD._are_friends(db, sender_id, recipient_id):
            raise AlreadyFriends()

        try:
            update_friend_lists(db, sender_id, FriendListMutation(add_outgoing={recipient_id}))
            db.commit()
        except IntegrityError:
            # Lost a race with an identical request
            db.rollback()
            raise AlreadyRequested()

        friend_request = FriendsCRUD._pending_request(db, sender_id, recipient_id)
        logger.info(f"Friend request sent: {sender_id} -> {recipient_id}")
        return friend_request

    @staticmethod
    def accept_friend_request(db: Session, sender_id: str, recipient_id: str) -> Friendship:
        """
        Accept the request ``sender_id`` sent to ``recipient_id``.

        Both users become friends and every pending request between them is
        removed. Accepting a pair that is already friends returns the
        existing friendship.
        """
        require_user(db, sender_id)
        require_user(db, recipient_id)

        existing = FriendsCRUD._get_friendship(db, sender_id, recipient_id)
        if existing is not None:
            return existing

        if FriendsCRUD._pending_request(db, sender_id, recipient_id) is None:
            raise NotFound("Friend request not found")

        mutation = FriendListMutation(
            add_friends={sender_id},
            remove_incoming={sender_id},
            # A crossing request from the recipient would otherwise survive
            remove_outgoing={sender_id},
        )
        try:
            update_friend_lists(db, recipient_id, mutation)
            db.commit()
        except IntegrityError:
            # A concurrent accept created the friendship first
            db.rollback()
            existing = FriendsCRUD._get_friendship(db, sender_id, recipient_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Friend request accepted: {sender_id} -> {recipient_id}")
        return FriendsCRUD._get_friendship(db, sender_id, recipient_id)

    @staticmethod
    def get_friend_requests(db: Session, user_id: str) -> List[User]:
        """Users with a pending request to ``user_id``, newest first."""
        require_user(db, user_id)
        requests = db.query(FriendRequest).filter(
            FriendRequest.recipient_id == user_id
        ).options(
            joinedload(FriendRequest.requester)
        ).order_by(FriendRequest.created_at.desc(), FriendRequest.id).all()
        return [req.requester for req in requests]

    @staticmethod
    def get_sent_friend_requests(db: Session, user_id: str) -> List[User]:
        """Users ``user_id`` has requested, newest first."""
        require_user(db, user_id)
        requests = db.query(FriendRequest).filter(
            FriendRequest.requester_id == user_id
        ).options(
            joinedload(FriendRequest.recipient)
        ).order_by(FriendRequest.created_at.desc(), FriendRequest.id).all()
        return [req.recipient for req in requests]

    @staticmethod
    def get_friends_list(db: Session, user_id: str) -> List[User]:
        """Friends of ``user_id`` in the order the friendships were made."""
        require_user(db, user_id)
        friendships = db.query(Friendship).filter(
            or_(
                Friendship.user1_id == user_id,
                Friendship.user2_id == user_id
            )
        ).options(
            joinedload(Friendship.user1),
            joinedload(Friendship.user2)
        ).order_by(Friendship.created_at, Friendship.id).all()
        return [f.user2 if f.user1_id == user_id else f.user1 for f in friendships]

    @staticmethod
    def get_friend_ids(db: Session, user_id: str) -> List[str]:
        return [friend.id for friend in FriendsCRUD.get_friends_list(db, user_id)]

    @staticmethod
    def get_other_users_with_status(db: Session, user_id: str) -> List[Tuple[User, bool, bool]]:
        """
        Every user except ``user_id`` as ``(user, has_pending_request, is_friend)``.

        ``has_pending_request`` is true when ``user_id`` has sent that user a
        request that is still pending.
        """
        current = require_user(db, user_id)
        outgoing = current.pending_outgoing_ids
        friends = current.friend_ids
        return [
            (other, other.id in outgoing, other.id in friends)
            for other in get_other_users(db, user_id)
        ]

    @staticmethod
    def reconcile_friend_state(db: Session) -> int:
        """
        Remove pending requests between users who are already friends.

        Returns the number of requests removed.
        """
        stale = db.query(FriendRequest).join(
            Friendship,
            or_(
                and_(Friendship.user1_id == FriendRequest.requester_id, Friendship.user2_id == FriendRequest.recipient_id),
                and_(Friendship.user1_id == FriendRequest.recipient_id, Friendship.user2_id == FriendRequest.requester_id)
            )
        ).all()
        for req in stale:
            logger.warning(f"Removing stale friend request {req.requester_id} -> {req.recipient_id}: users are already friends")
            db.delete(req)
        db.commit()
        return len(stale)

    @staticmethod
    def _pending_request(db: Session, requester_id: str, recipient_id: str):
        return db.query(FriendRequest).filter(
            and_(
                FriendRequest.requester_id == requester_id,
                FriendRequest.recipient_id == recipient_id
            )
        ).first()

    @staticmethod
    def _pending_between(db: Session, user1_id: str, user2_id: str):
        return db.query(FriendRequest).filter(
            or_(
                and_(FriendRequest.requester_id == user1_id, FriendRequest.recipient_id == user2_id),
                and_(FriendRequest.requester_id == user2_id, FriendRequest.recipient_id == user1_id)
            )
        ).first()

    @staticmethod
    def _get_friendship(db: Session, user1_id: str, user2_id: str):
        user1_id, user2_id = Friendship.ordered_pair(user1_id, user2_id)
        return db.query(Friendship).filter(
            and_(
                Friendship.user1_id == user1_id,
                Friendship.user2_id == user2_id
            )
        ).first()

    @staticmethod
    def _are_friends(db: Session, user1_id: str, user2_id: str) -> bool:
        """Check if two users are friends"""
        return FriendsCRUD._get_friendship(db, user1_id, user2_id) is not None
