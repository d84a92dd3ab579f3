"""Logging configuration helpers."""

from __future__ import annotations

import logging

from hookline.config import HooklineConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | HooklineConfig = "INFO") -> None:
    if isinstance(level, HooklineConfig):
        level = level.log_level
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("hookline").setLevel(resolved)
