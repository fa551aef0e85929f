"""Shared helpers for mynk CLI commands.

This module provides exit codes, logging setup and engine construction used
across CLI commands.
"""

from __future__ import annotations

import logging
import sys

from mynk.client.anchor import Anchor
from mynk.client.api import HTTPClient
from mynk.core.config import ServerConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
# Remote answered but the response was only partly applied
EXIT_PARTIAL = 3

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbosity: int) -> None:
    """Configure the mynk logger to write to stderr.

    Args:
        verbosity: 0 for warnings only, 1 for info, 2 or more for debug.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    mynk_logger = logging.getLogger("mynk")
    for handler in mynk_logger.handlers[:]:
        mynk_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    mynk_logger.addHandler(handler)
    mynk_logger.setLevel(level)
    mynk_logger.propagate = False


def make_client(anchor: Anchor) -> HTTPClient:
    """Create the HTTP client for an anchor's endpoint.

    Raises:
        ValueError: If an environment override is invalid.
    """
    config = ServerConfig.from_env(anchor.uri)
    if not config.is_secure:
        logger.info(f"Remote {config.server_url} is not using HTTPS")
    elif not config.verify_ssl:
        logger.warning("SSL certificate verification is disabled")
    return HTTPClient(config)
