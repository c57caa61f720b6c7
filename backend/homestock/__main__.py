"""
HomeStock Backend — Command-Line Entry Point
==============================================

What:  `python -m homestock` (or the `homestock` console script) starts the
       API with uvicorn on the configured host and port.
Why:   Refuses to start, with exit status 1, when the port is already bound,
       instead of leaving the failure to a socket error deep in uvicorn.

Exit statuses:
    0  clean shutdown
    1  port already in use
    3  application startup failed (missing DATABASE_URL, database unreachable)
"""

import errno
import logging
import socket
import sys

import uvicorn

from homestock.config import settings
from homestock.exceptions import StartupError
from homestock.main import setup_logging

logger = logging.getLogger("homestock")


def ensure_port_available(host: str, port: int) -> None:
    """
    Raises:
        StartupError: something is already listening on host:port.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                raise StartupError(detail=f"Port {port} is already in use") from e
            raise StartupError(detail=f"Cannot bind {host}:{port}: {e}") from e


def run() -> None:
    setup_logging(settings.log_level)
    try:
        ensure_port_available(settings.backend_host, settings.port)
    except StartupError as e:
        logger.error("Server startup error: %s", e.detail)
        sys.exit(1)

    uvicorn.run(
        "homestock.main:app",
        host=settings.backend_host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
