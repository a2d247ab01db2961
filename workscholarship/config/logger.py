# workscholarship/config/logger.py
import logging
import sys

from workscholarship.config.config import Settings, settings

LOGGER_NAME = "workscholarship"
LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logger(cfg: Settings) -> logging.Logger:
    """
    Логгер проекта: вывод в stdout, DEBUG в dev, иначе INFO.
    Повторный вызов только меняет уровень, второй хендлер не добавляется.
    """
    level = logging.DEBUG if cfg.env == "dev" else logging.INFO
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(level)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        log.addHandler(handler)
    for handler in log.handlers:
        handler.setLevel(level)
    return log


logger = configure_logger(settings)
