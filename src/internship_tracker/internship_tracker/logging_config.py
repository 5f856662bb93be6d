from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging once for the process."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)

    # mysql-connector is chatty at DEBUG
    logging.getLogger("mysql.connector").setLevel(max(level, logging.WARNING))
