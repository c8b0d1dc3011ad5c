import logging.config
from typing import Any, Dict

from .config import settings


def build_logging_config(enable_console_output: bool, level: str) -> Dict[str, Any]:
    """Return a dictConfig mapping for the service loggers.

    With console output disabled every record goes to a null handler, which
    is how the published container images run.
    """
    handler = {
        "level": level,
        "class": "logging.StreamHandler",
        "formatter": "simple",
    }
    if not enable_console_output:
        handler = {"class": "logging.NullHandler"}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "{asctime} [{levelname}] {name}: {message}",
                "style": "{",
            },
        },
        "handlers": {"console": handler},
        "loggers": {
            "app": {
                "handlers": ["console"],
                "level": level,
                "propagate": True,
            },
        },
    }


def configure_logging() -> None:
    logging.config.dictConfig(
        build_logging_config(settings.enable_console_output, settings.log_level)
    )
