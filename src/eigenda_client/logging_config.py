"""Structured logging configuration for the EigenDA client."""

import structlog
import logging
import sys


def configure_logging(log_level: str = "INFO", enable_json: bool = True):
    """
    Configure structured logging for the client.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json: Whether to use JSON formatting
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(message)s"
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if enable_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


class ClientLogger:
    """Structured logger with bound context."""

    def __init__(self, name: str = None, logger=None):
        self.logger = logger if logger is not None else structlog.get_logger(name)

    def bind_context(self, **kwargs) -> 'ClientLogger':
        """Return a logger with additional context bound."""
        return ClientLogger(logger=self.logger.bind(**kwargs))

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)


def get_logger(name: str) -> ClientLogger:
    """Get a structured logger instance."""
    return ClientLogger(name)
