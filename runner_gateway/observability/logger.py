"""
Logger configuration.

Single stdout handler whose records carry the service name and the current
correlation id, so API requests, worker jobs and runner calls can be
followed across processes.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

from runner_gateway.observability.correlation import get_correlation_id

LOG_FORMAT = "%(asctime)s %(levelname)s %(service)s [%(correlation_id)s] %(name)s - %(message)s"

# Chatty clients whose INFO/DEBUG output drowns job logs
QUIET_LOGGERS = (
    "botocore",
    "boto3",
    "urllib3",
    "httpx",
    "httpcore",
    "azure.identity",
    "azure.core.pipeline.policies.http_logging_policy",
)


class ContextFilter(logging.Filter):
    """Stamps ``service`` and ``correlation_id`` onto every record."""

    def __init__(self, service: str) -> None:
        super().__init__()
        self._service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self._service
        record.correlation_id = get_correlation_id() or "-"
        return True


def configure_logging(level: str = "INFO", service: str = "runner-gateway") -> None:
    """
    Install the stdout handler on the root logger.

    Safe to call more than once; previous handlers are replaced.

    Args:
        level: Root log level name (DEBUG, INFO, ...)
        service: Service name shown on each line
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextFilter(service))
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))

    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
