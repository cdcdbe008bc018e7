from __future__ import annotations

import logging


LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", *, discord_level: str | None = None) -> None:
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,
    )
    if discord_level:
        logging.getLogger("discord").setLevel(getattr(logging, discord_level.upper(), logging.INFO))
    # APScheduler logs every job execution at INFO.
    logging.getLogger("apscheduler").setLevel(max(log_level, logging.WARNING))
