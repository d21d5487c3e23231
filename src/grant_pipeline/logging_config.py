from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level, format=_LOG_FORMAT, force=True)
    # requests/urllib3 log every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(numeric_level, logging.WARNING))
