"""Logging setup shared by the ASGI app and the command line entrypoint."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # uvicorn's access log duplicates the per-request debug lines of the router
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
