"""
One stdout stream for uvicorn, the request middleware ("mockapi") and the
upload modules (storage, submission, routes).

LOG_LEVEL and LOG_FORMAT set level and format. ACCESS_LOG=false quiets
uvicorn's access lines, since request_id_and_latency (app/main.py) already logs
every request. Storage failures reach the log via logger.exception in
app/main.py; corrupt log documents as warnings from app/core/storage.py.
"""
import logging
import sys

from app.core.config import settings

APP_LOGGERS = ("mockapi", "app.api", "app.core.storage", "app.services.submission")
# python-multipart logs every parsed part at DEBUG
NOISY_LOGGERS = ("multipart", "python_multipart")


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else logging.INFO


def setup_logging(
    level: int | str | None = None,
    format_string: str | None = None,
    access_log: bool | None = None,
) -> None:
    level = _level_number(level if level is not None else settings.log_level)
    if access_log is None:
        access_log = settings.access_log
    logging.basicConfig(
        level=level,
        format=format_string or settings.log_format,
        stream=sys.stdout,
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level if access_log else logging.WARNING)
    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
