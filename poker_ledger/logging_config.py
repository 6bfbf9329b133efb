import logging, logging.config

LEDGER_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO", access_log: bool = True, sql_echo: bool = False):
    """Console logging for the ledger, uvicorn and (optionally) emitted SQL."""
    level = level.upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "ledger": {"format": LEDGER_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "access_simple": {"format": "%(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "ledger"},
            "access":  {"class": "logging.StreamHandler", "formatter": "access_simple"},
        },
        "loggers": {
            "poker_ledger":   {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.error":  {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": ("INFO" if access_log else "WARNING"),
                               "handlers": ["access"], "propagate": False},
            "sqlalchemy.engine": {"level": ("INFO" if sql_echo else "WARNING"),
                                  "handlers": ["console"], "propagate": False},
        },
        "root": {"level": level, "handlers": ["console"]},
    })
