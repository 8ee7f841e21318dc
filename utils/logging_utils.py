import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

from config import get_settings

_LOGGER_NAME = "frontdesk_pms"
_FORMATTER = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")


def _build_handler(log_file: Union[str, Path]) -> logging.Handler:
    try:
        handler = RotatingFileHandler(Path(log_file), maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    except OSError:
        handler = logging.StreamHandler()
    handler.setFormatter(_FORMATTER)
    return handler


def configure_logging(log_file: Union[str, Path]) -> logging.Logger:
    """(Re)apunta el logger al archivo indicado; reemplaza el handler anterior"""
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(_build_handler(log_file))
    return logger


_logger = logging.getLogger(_LOGGER_NAME)
if not _logger.handlers:
    configure_logging(get_settings().log_file)


def _format(area: str, user: str, action: str, detail: str) -> str:
    message = f"{area.upper()} | User: {user} | Action: {action}"
    if detail:
        message += f" | Detail: {detail}"
    return message


def log_event(area: str, user: str, action: str, detail: str = "") -> None:
    _logger.info(_format(area, user, action, detail))


def log_error(area: str, user: str, action: str, detail: str = "") -> None:
    _logger.error(_format(area, user, action, detail))
