import logging
import logging.config


class ShortNameFilter(logging.Filter):
    """Adds `shortname`: last two dotted parts of the logger name (`indexer-service`)."""

    def filter(self, record):
        record.shortname = "-".join(record.name.split(".")[-2:])
        return True


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "shortname": {"()": "app.utils.logging_config.ShortNameFilter"},
    },
    "formatters": {
        "custom": {
            "format": "[%(asctime)s] [%(levelname)s] %(shortname)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "custom",
            "filters": ["shortname"],
        },
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        # connection-pool chatter from requests
        "urllib3": {"level": "WARNING"},
    },
}


def configure_logging(level: str | None = None) -> None:
    config = dict(LOGGING_CONFIG)
    if level:
        config["root"] = {**LOGGING_CONFIG["root"], "level": level.upper()}
    logging.config.dictConfig(config)
