"""
Logging setup for pathmonitor

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed by the runner through setup_logging().
"""
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterable, Optional

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are noisy below WARNING
QUIET_LOGGERS = ('watchdog', 'asyncio')


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with callback context merged in"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'thread': record.threadName,
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }

        context = getattr(record, 'context', None)
        if isinstance(context, dict):
            for key, value in context.items():
                payload.setdefault(key, value)

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class ColorFormatter(logging.Formatter):
    """ANSI-colored level names for terminals"""

    RESET = '\033[0m'
    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[41m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        # Other handlers share the record; color a copy
        painted = logging.makeLogRecord(record.__dict__)
        painted.levelname = f"{color}{record.levelname}{self.RESET}"
        if record.levelno >= logging.ERROR:
            painted.msg = f"{color}{record.msg}{self.RESET}"
        return super().format(painted)


def _plain_formatter() -> logging.Formatter:
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)


FORMATTERS = {
    'text': _plain_formatter,
    'json': JsonFormatter,
    'color': lambda: ColorFormatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT),
}


def setup_logging(log_level: str = "INFO",
                  log_file: Optional[str] = None,
                  log_format: str = "text",
                  max_file_size: int = 10 * 1024 * 1024,
                  backup_count: int = 5,
                  quiet_loggers: Iterable[str] = QUIET_LOGGERS) -> logging.Logger:
    """
    Install console (and optional rotating file) handlers on the root logger

    Any handlers already on the root logger are replaced, so calling this
    twice does not duplicate output.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file: Rotating log file; console only when None
        log_format: text, json or color (files get text instead of color)
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files to keep
        quiet_loggers: Logger names capped at WARNING

    Returns:
        The root logger
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    log_format = log_format.lower()
    make_formatter = FORMATTERS.get(log_format, _plain_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(make_formatter())

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=max_file_size, backupCount=backup_count, encoding='utf-8'
        )
        file_handler.setFormatter(JsonFormatter() if log_format == 'json' else _plain_formatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        root_logger.addHandler(handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    destination = f"stdout and {log_file}" if log_file else "stdout"
    root_logger.info(f"Logging to {destination} (level: {logging.getLevelName(level)}, format: {log_format})")
    return root_logger


def log_exception(logger: logging.Logger, exception: BaseException,
                  message: str = "Exception occurred", extra: Optional[Dict] = None):
    """
    Log exception at ERROR with its traceback

    Args:
        logger: Logger to write to
        exception: The caught exception
        message: Log message
        extra: Context fields (shown as ``record.context``, merged into JSON output)
    """
    exc_info = (type(exception), exception, exception.__traceback__)
    logger.error(message, exc_info=exc_info, extra={'context': dict(extra or {})})
