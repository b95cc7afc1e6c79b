from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", *, quiet: bool = False) -> None:
    # The CLI prints JSON on stdout; log records go to stderr via basicConfig.
    effective = "WARNING" if quiet else level
    logging.basicConfig(level=effective.upper(), format=LOG_FORMAT)
