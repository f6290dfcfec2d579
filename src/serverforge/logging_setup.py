from __future__ import annotations

import logging


def setup_logging(level: str) -> None:
    resolved = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # discord.py is chatty at INFO (gateway resumes, heartbeats)
    logging.getLogger("discord").setLevel(max(resolved, logging.WARNING))
    logging.getLogger("discord.http").setLevel(max(resolved, logging.WARNING))

    logging.getLogger("serverforge").info("Logging configured at %s", logging.getLevelName(resolved))
