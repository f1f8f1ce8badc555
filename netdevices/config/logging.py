"""
Logging configuration for the engine.

Rotating file plus console output. Every handler carries a filter that
masks passwords, passphrases and private key bodies, so device transcripts
logged at DEBUG never leak credentials.
"""

import os
import re
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_SECRET_PATTERNS = (
    (re.compile(r'-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----', re.S),
     '[REDACTED KEY]'),
    (re.compile(r'(?i)\b(password|passphrase|secret)(\s*[=:]\s*|\s+)(\S+)'), r'\1\2[REDACTED]'),
)


class RedactingFilter(logging.Filter):
    """Mask credential material in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def redact(text: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def setup_logging(
    log_file: Optional[str] = None,
    log_level: str = 'INFO',
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    log_format: Optional[str] = None,
    transport_level: str = 'WARNING',
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        log_file: Path to the log file (default: logs/netdevices.log under the cwd)
        log_level: Level name for the root logger and its handlers
        max_bytes: Size at which the file rotates
        backup_count: Rotated files to keep
        log_format: Format string, DEFAULT_FORMAT when omitted
        transport_level: Level for the paramiko logger

    Returns:
        The root logger
    """
    log_file = log_file or os.path.join(os.getcwd(), 'logs', 'netdevices.log')
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = logging.Formatter(log_format or DEFAULT_FORMAT)
    secrets_filter = RedactingFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers = [
        RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(secrets_filter)
        root_logger.addHandler(handler)

    # paramiko logs every negotiation step at INFO
    logging.getLogger('paramiko').setLevel(getattr(logging, transport_level.upper(), logging.WARNING))

    root_logger.info(f"Logging initialized: level={log_level}, file={log_file}")
    return root_logger


def init_logging() -> logging.Logger:
    """Configure logging from LOG_LEVEL / LOG_FILE via the engine settings."""
    from .settings import get_settings

    settings = get_settings()
    return setup_logging(log_file=settings.log_file, log_level=settings.log_level)
