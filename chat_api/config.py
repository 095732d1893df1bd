from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    """Application settings."""
    # Base settings
    DEBUG: bool = False
    APP_NAME: str = "Chat API"

    # CORS settings
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # Frontend development server
        "http://localhost:8081",  # Expo dev server
        "http://localhost:8000",  # Backend server
    ]

    # Database settings
    DB_HOST: str = "localhost"
    DB_PORT: str = "5432"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "chat_api"
    DATABASE_URL: Optional[str] = None

    # Auth settings
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_MIN_LENGTH: int = 6

    # Uploaded image storage
    FILES_DIR: str = "./files"
    FILES_URL_PREFIX: str = "/files"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # 5MB

    # Rate limiting (Redis is optional, memory storage is used otherwise)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/15minutes"
    REDIS_URL: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url(self) -> str:
        """Explicit DATABASE_URL wins over the individual DB_* parts."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"


def get_settings() -> Settings:
    """Build settings from the environment."""
    return Settings()
