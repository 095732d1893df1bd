import argparse

from chat_api.config import get_settings
from chat_api.crud.friends import FriendsCRUD
from chat_api.database import Database
from chat_api.logging_config import configure_logging
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)


def init_db(database: Database):
    """Create any missing tables."""
    try:
        database.create_all()
        logger.info("Database initialization check complete")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        raise


def reconcile(database: Database) -> int:
    """Drop pending requests left between users who are already friends."""
    db = database.get_session_local()()
    try:
        removed = FriendsCRUD.reconcile_friend_state(db)
        logger.info(f"Friend state reconciliation removed {removed} stale request(s)")
        return removed
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the chat database schema")
    parser.add_argument("--reconcile", action="store_true", help="also remove stale pending friend requests")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)
    database = Database(settings)
    try:
        init_db(database)
        if args.reconcile:
            reconcile(database)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
