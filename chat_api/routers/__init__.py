# API Routers
from chat_api.routers import api, users, friends, messages

__all__ = ["api", "users", "friends", "messages"]
