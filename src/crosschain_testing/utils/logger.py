from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import wraps
from time import perf_counter
from typing import Callable, Optional

from loguru import logger


@dataclass
class LogConfig:
    level: str = "INFO"
    dir: Optional[str] = None      # None = stderr only
    rotation: str = "1 day"
    retention: str = "30 days"


class Logging:
    """
    Thin loguru wrapper shared by every harness component.

    Nothing is reconfigured on import; loguru's default stderr sink stays in
    place until ``configure`` is called (tests and the demo call it).
    """

    def __init__(self, config: Optional[LogConfig] = None):
        self.config = config or LogConfig()

    def configure(self, config: Optional[LogConfig] = None) -> None:
        if config is not None:
            self.config = config
        cfg = self.config

        logger.remove()
        logger.add(
            sys.stderr,
            level=cfg.level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
        )
        if cfg.dir:
            os.makedirs(cfg.dir, exist_ok=True)
            logger.add(
                sink=f"{cfg.dir}/{{time:YYYY-MM-DD}}.log",
                rotation=cfg.rotation,
                retention=cfg.retention,
                level=cfg.level,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
                enqueue=True,
                backtrace=True,
                diagnose=True,
            )
        logger.debug("[Logging] configured level={} dir={}", cfg.level, cfg.dir)

    # ----------- log methods -----------
    def debug(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).exception(msg, *args, **kwargs)

    # ---------- decorator ----------
    def timed(self, label: Optional[str] = None) -> Callable:
        """Log how long the wrapped call took; exceptions are logged and re-raised."""

        def decorator(func: Callable):
            name = label or func.__name__

            @wraps(func)
            def wrapper(*args, **kwargs):
                start = perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    logger.exception(f"[ERROR] {name} failed")
                    raise
                logger.debug(f"[TIME] {name} took {perf_counter() - start:.4f}s")
                return result

            return wrapper

        return decorator


logs = Logging()
