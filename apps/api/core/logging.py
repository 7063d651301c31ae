"""Logging setup for the statement import API and CLI.

API and service modules emit structlog events named after the import step
(statement_parsed, statement_upload_retry, statement_record_failed,
statement_status_update_failed, transactions_recategorized) with key/value
context. Output is JSON when ENVIRONMENT=production and a colorized console
otherwise.

The parser package logs through stdlib `logging` (skipped rows at DEBUG, a
parse summary at INFO); basicConfig routes those records to stdout at
LOG_LEVEL, so one setting controls both.
"""

import logging
import sys

import structlog

from apps.api.core.config import Settings

QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Python log level string (DEBUG, INFO, WARNING, ERROR).
        json_output: If True, use JSON renderer (production). If False,
                     use colorized console renderer (development).
    """
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    # supabase-py logs every PostgREST/Storage request through httpx at INFO
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging_from_settings(settings: Settings) -> None:
    """Configure logging from the LOG_LEVEL / ENVIRONMENT settings."""
    setup_logging(log_level=settings.LOG_LEVEL, json_output=settings.json_logs)
