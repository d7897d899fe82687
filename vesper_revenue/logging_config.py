"""
Logging configuration for the Vesper revenue indexer.

Console output is attached to the ``vesper_revenue`` logger only, so an
indexing host keeps control of its own root handlers. Set REVENUE_DEBUG=1
to also write DEBUG output of the handlers to a file.
"""
import logging
import sys
import os
from pathlib import Path

PACKAGE_LOGGER = 'vesper_revenue'

REVENUE_DEBUG = os.getenv('REVENUE_DEBUG', '').lower() in ('1', 'true', 'yes')

DEBUG_LOG_PATH = Path(os.getenv('REVENUE_DEBUG_LOG', Path.cwd() / 'revenue_debug.log'))

# boto3 S3 store and web3 HTTPProvider (requests/urllib3) log every request at DEBUG
NOISY_LOGGERS = (
    'botocore',
    'boto3',
    's3transfer',
    'urllib3',
    'web3.providers',
    'web3.RequestManager',
    'web3.manager',
)

_LEVEL_TAGS = {
    logging.DEBUG: ('D', '90'),
    logging.INFO: ('I', '32'),
    logging.WARNING: ('W', '33'),
    logging.ERROR: ('E', '31'),
    logging.CRITICAL: ('!', '31;1'),
}


class ConciseFormatter(logging.Formatter):
    """One line per record: level tag, short logger name for DEBUG/ERROR, message."""

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def _tag(self, levelno: int) -> str:
        letter, color = _LEVEL_TAGS.get(levelno, _LEVEL_TAGS[logging.INFO])
        if not self.use_color:
            return f"[{letter}]"
        return f"\033[{color}m[{letter}]\033[0m"

    def format(self, record):
        message = record.getMessage()
        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            # vesper_revenue.services.handlers -> handlers
            message = f"{record.name.rsplit('.', 1)[-1]}: {message}"
        line = f"{self._tag(record.levelno)} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class VerboseFormatter(logging.Formatter):
    """Debug-file format with source location."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(name)s (%(module)s:%(lineno)d): %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        )


def setup_logging(level=logging.INFO, stream=None):
    """
    Configure console logging for the package. Safe to call more than once.

    Args:
        level: level of the ``vesper_revenue`` logger
        stream: output stream, stdout by default; colours only on a terminal

    Returns:
        The package logger
    """
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    stream = stream or sys.stdout
    app_logger = logging.getLogger(PACKAGE_LOGGER)
    app_logger.setLevel(level)
    app_logger.propagate = False
    for handler in list(app_logger.handlers):
        if handler.name == 'revenue_console':
            app_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ConciseFormatter(use_color=hasattr(stream, 'isatty') and stream.isatty()))
    handler.name = 'revenue_console'
    app_logger.addHandler(handler)

    if REVENUE_DEBUG:
        setup_handler_debug_logging()
        app_logger.info(f"REVENUE_DEBUG enabled - verbose logs written to {DEBUG_LOG_PATH}")

    return app_logger


def setup_handler_debug_logging():
    """
    Write DEBUG-level output of the services package to the debug log file.
    Safe to call more than once.
    """
    services_logger = logging.getLogger(f'{PACKAGE_LOGGER}.services')
    services_logger.setLevel(logging.DEBUG)
    if any(getattr(h, 'name', None) == 'revenue_debug_file' for h in services_logger.handlers):
        return

    file_handler = logging.FileHandler(DEBUG_LOG_PATH, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(VerboseFormatter())
    file_handler.name = 'revenue_debug_file'
    services_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Logger inside the package namespace. Modules run as scripts
    (``python -m vesper_revenue.replay``) are named ``__main__`` and map to
    ``vesper_revenue.cli``.
    """
    if name == '__main__':
        return logging.getLogger(f'{PACKAGE_LOGGER}.cli')
    if name.startswith(PACKAGE_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f'{PACKAGE_LOGGER}.{name}')
