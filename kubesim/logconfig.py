import logging

# levels as accepted in config files, mapped onto stdlib logging
LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

logging_config = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)-8s %(process)d %(name)s:%(lineno)d %(message)s",
        },
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "kubesim": {"level": "INFO", "handlers": ["default"], "propagate": False},
    },
    "root": {"level": "WARNING", "handlers": ["default"]},
}


def set_level(level: str) -> None:
    logging.getLogger("kubesim").setLevel(LEVELS[level.lower()])
