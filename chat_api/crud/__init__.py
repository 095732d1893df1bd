from chat_api.crud.user import (
    get_user,
    require_user,
    get_user_by_email,
    create_user,
    authenticate_user,
    get_other_users,
    FriendListMutation,
    update_friend_lists,
)
from chat_api.crud.message import (
    get_message,
    create_message,
    get_conversation,
    delete_messages,
)
from chat_api.crud.friends import FriendsCRUD

__all__ = [
    # User operations
    "get_user",
    "require_user",
    "get_user_by_email",
    "create_user",
    "authenticate_user",
    "get_other_users",
    "FriendListMutation",
    "update_friend_lists",

    # Message operations
    "get_message",
    "create_message",
    "get_conversation",
    "delete_messages",

    # Friends operations
    "FriendsCRUD"
]
