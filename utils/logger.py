"""
Logging utilities with API key masking.

Provider keys travel in request headers and query strings, and provider
error bodies sometimes echo them back, so every message that reaches a
handler (or an exception shown to the user) goes through mask_secrets().
"""

import logging
import os
import re
from enum import Enum
from typing import Optional

from config.settings import settings


class LoggingContext(Enum):
    """Logging context modes for different execution scenarios."""
    STANDALONE = "standalone"      # CLI run (INFO everywhere)
    ORCHESTRATED = "orchestrated"  # CLI run, library modules quiet
    SILENT = "silent"              # Embedded in a request handler


_env_mode = os.getenv('LOG_MODE', 'standalone').lower()
try:
    _CURRENT_MODE = LoggingContext(_env_mode)
except ValueError:
    _CURRENT_MODE = LoggingContext.STANDALONE

# Entry scripts keep INFO in orchestrated mode
CONSOLE_LOGGERS = {'run_ai_analysis'}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# sk-..., xai-..., Gemini AIza... and other long opaque tokens
_KEY_PATTERN = re.compile(r'\b(?:sk-|xai-)?[A-Za-z0-9_\-]{20,}\b')


def set_logging_mode(mode: LoggingContext):
    global _CURRENT_MODE
    _CURRENT_MODE = mode


def get_logging_mode() -> LoggingContext:
    return _CURRENT_MODE


def mask_secrets(text: str) -> str:
    """
    Mask configured provider keys and anything shaped like one.

    Configured keys are replaced verbatim first, so short keys that the
    pattern would miss are still hidden.
    """
    if not text:
        return text
    for key in settings.configured_keys():
        if len(key) >= 8 and key in text:
            text = text.replace(key, settings.mask_api_key(key))
    return _KEY_PATTERN.sub(lambda match: settings.mask_api_key(match.group(0)), text)


class SecureFormatter(logging.Formatter):
    """Formatter that runs mask_secrets() over the final message."""

    def format(self, record):
        return mask_secrets(super().format(record))


def _effective_level(name: str, level: int) -> int:
    mode = get_logging_mode()
    if mode == LoggingContext.SILENT:
        return logging.CRITICAL
    if mode == LoggingContext.ORCHESTRATED and name not in CONSOLE_LOGGERS:
        return logging.ERROR
    return level


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Setup a logger with secure formatting and context-aware levels.

    Args:
        name: Logger name
        level: Logging level (may be raised by the current LoggingContext)
        log_file: Optional file path; defaults to the AI_LOG_FILE env var

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    effective_level = _effective_level(name, level)
    logger.setLevel(effective_level)

    # Re-running setup must not stack handlers
    logger.handlers.clear()

    formatter = SecureFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler()]

    log_file = log_file or os.getenv('AI_LOG_FILE')
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(effective_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
