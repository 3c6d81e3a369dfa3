"""
Logging configuration for the flare CLI
"""

import logging
import logging.config
from typing import Any, Dict


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration for the given level."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                # stdout is left to the run summary
                "stream": "ext://sys.stderr"
            }
        },
        "loggers": {
            "flare": {
                "handlers": ["default"],
                "level": level.upper(),
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the flare logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
