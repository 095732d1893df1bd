from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
from fastapi import HTTPException
from chat_api.config import Settings
from chat_api.exceptions import ChatAPIError
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)

# Database connection pooling configuration
POOL_SIZE = 5          # Base connections per worker
MAX_OVERFLOW = 10      # Additional connections when needed
POOL_TIMEOUT = 30      # Seconds to wait for connection
POOL_RECYCLE = 1800    # Recycle connections every 30 minutes
POOL_PRE_PING = True   # Validate connections before use

Base = declarative_base()


class Database:
    """Engine and session factory built from application settings.

    One instance is created per application and stored on ``app.state``;
    request handlers get sessions from it through the ``get_db`` dependency.
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        self.debug = settings.DEBUG
        self._engine = None
        self._session_local = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def get_engine(self):
        """Get database engine with lazy initialization for Gunicorn worker compatibility."""
        if self._engine is None:
            if self.is_sqlite:
                # SQLite is used for local runs and tests; sessions cross threads there
                self._engine = create_engine(
                    self.url,
                    connect_args={"check_same_thread": False},
                    echo=self.debug,
                )
                logger.info("Database engine configured for SQLite")
            else:
                self._engine = create_engine(
                    self.url,
                    poolclass=QueuePool,
                    pool_size=POOL_SIZE,
                    max_overflow=MAX_OVERFLOW,
                    pool_timeout=POOL_TIMEOUT,
                    pool_recycle=POOL_RECYCLE,
                    pool_pre_ping=POOL_PRE_PING,
                    echo=self.debug,  # Log SQL queries in debug mode
                    echo_pool=self.debug,  # Log pool events in debug mode
                )
                logger.info(f"Database pool configured: size={POOL_SIZE}, max_overflow={MAX_OVERFLOW}, timeout={POOL_TIMEOUT}s")
        return self._engine

    def get_session_local(self):
        """Get SessionLocal with lazy initialization."""
        if self._session_local is None:
            self._session_local = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=self.get_engine())
        return self._session_local

    def create_all(self):
        """Create all tables that do not exist yet."""
        # Import models so they register with Base.metadata
        import chat_api.models  # noqa: F401
        Base.metadata.create_all(bind=self.get_engine())

    def session(self):
        """
        Yield a session with rollback on error and guaranteed close.
        Used as the body of the ``get_db`` dependency.
        """
        db = self.get_session_local()()
        try:
            yield db
        except (ChatAPIError, HTTPException) as e:
            # Expected request failures (404, 400, 401...)
            logger.debug(f"Request ended with {type(e).__name__}: {e}")
            db.rollback()
            raise
        except Exception as e:
            logger.error(f"Database session error: {e}")
            try:
                db.rollback()
            except Exception as rollback_error:
                logger.error(f"Error during rollback: {rollback_error}")

            # Log additional connection pool status for debugging
            logger.error(f"Pool status during error: {self.get_pool_status()}")
            raise
        finally:
            try:
                db.close()
            except Exception as close_error:
                logger.error(f"Error closing database session: {close_error}")

    def get_pool_status(self):
        """
        Get current database connection pool status.
        Useful for monitoring and debugging.
        """
        try:
            pool = self.get_engine().pool
            if not isinstance(pool, QueuePool):
                return {"pool_type": type(pool).__name__}
            return {
                "pool_size": pool.size(),
                "checked_in": pool.checkedin(),
                "checked_out": pool.checkedout(),
                "overflow": pool.overflow(),
                "pool_type": type(pool).__name__
            }
        except Exception as e:
            return {
                "error": f"Could not get pool status: {str(e)}",
                "pool_type": "unknown"
            }

    def dispose(self):
        """Dispose of the engine and drop the cached session factory."""
        if self._engine is not None:
            logger.info("Disposing database engine...")
            self._engine.dispose()
        self._engine = None
        self._session_local = None
