"""Logging configuration for the package logger tree."""

from logging.config import dictConfig

LOGGER_NAME = "movie_catalog"
LOG_FORMAT = "%(levelprefix)s | %(asctime)s | %(name)s | %(message)s"


def create_log_config(log_level: str) -> dict:
    """Logging configuration."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            LOGGER_NAME: {"handlers": ["default"], "level": log_level.upper()},
        },
    }


def configure_logging(log_level: str) -> None:
    dictConfig(create_log_config(log_level))
