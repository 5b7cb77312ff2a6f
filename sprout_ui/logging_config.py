import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
QUIET_LOGGERS = ("urllib3", "requests", "watchdog")


def configure_logging(env_var="DASHBOARD_LOG_LEVEL"):
    level = logging.getLevelName((os.getenv(env_var) or "INFO").strip().upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return level
