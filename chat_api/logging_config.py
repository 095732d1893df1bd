from logging.config import dictConfig

from chat_api.config import Settings


def build_logging_config(debug: bool = False) -> dict:
    """Central logging configuration; every formatter prints the request ID."""
    level = "DEBUG" if debug else "INFO"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "chat_api.utils.logger.RequestAwareFormatter",
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s",
            },
            "simple": {
                "()": "chat_api.utils.logger.RequestAwareFormatter",
                "format": "%(asctime)s - %(levelname)s - [%(request_id)s] - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "root": {  # Root logger for all logs
            "level": level,
            "handlers": ["console"],
        },
        "loggers": {
            "chat_api": {  # Catch-all logger for all app modules
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "INFO" if debug else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def configure_logging(settings: Settings):
    """Configure logging for the application."""
    dictConfig(build_logging_config(settings.DEBUG))
