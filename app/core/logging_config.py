"""Logging configuration for the API process and the Celery workers."""

import logging.config

from app.core.config import LogFormatEnum, Settings

FORMATS = {
    LogFormatEnum.simple: "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    LogFormatEnum.json: (
        '{"time":"%(asctime)s","level":"%(levelname)s",'
        '"module":"%(name)s","message":"%(message)s"}'
    ),
}

# Libraries that are too chatty at INFO
QUIET_LOGGERS = ["httpx", "httpcore", "PIL", "asyncio"]


def setup_logging(settings: Settings) -> None:
    level = settings.log_level.value
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": FORMATS[settings.log_format],
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }
    logging.config.dictConfig(config)
