import logging.config


def setup_logging(level: str = "INFO") -> None:
    """Single logging configuration for the API and uvicorn."""
    log_format = "%(asctime)s %(levelname)s %(name)s %(message)s"
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": log_format},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "plain"},
        },
        "loggers": {
            "": {"handlers": ["default"], "level": level},
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
        },
    })
