"""Utility modules: logging, HTTP client."""

from src.utils.logging import setup_logging, get_logger
from src.utils.http import create_http_client, send_with_retry

__all__ = [
    "setup_logging",
    "get_logger",
    "create_http_client",
    "send_with_retry",
]
