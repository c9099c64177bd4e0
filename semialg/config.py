"""Settings read from the environment.

SEMIALG_CACHE_SIZE   entries per memo (root isolation, discriminants, resultants)
SEMIALG_PRECISION    optional rational width for freshly isolated intervals, e.g. 1/1000
SEMIALG_LOG_LEVEL    level of the "semialg" logger when configure_logging() is used
"""

import logging
import os
import sys
from dataclasses import dataclass
from fractions import Fraction

DEFAULT_CACHE_SIZE = 10000
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "[%(name)s] %(levelname)s %(message)s"

CACHE_SIZE = int(os.environ.get("SEMIALG_CACHE_SIZE", DEFAULT_CACHE_SIZE))
PRECISION = Fraction(os.environ["SEMIALG_PRECISION"]) if os.environ.get("SEMIALG_PRECISION") else None
LOG_LEVEL = os.environ.get("SEMIALG_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


@dataclass(frozen=True)
class Settings:
    cache_size: int = DEFAULT_CACHE_SIZE
    precision: Fraction | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if self.cache_size <= 0:
            raise ValueError(f"Cache size must be positive, got {self.cache_size}")
        if self.precision is not None and self.precision <= 0:
            raise ValueError(f"Precision must be positive, got {self.precision}")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(cache_size=CACHE_SIZE, precision=PRECISION, log_level=LOG_LEVEL)


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stderr handler to the package logger (idempotent)."""
    logger = logging.getLogger("semialg")
    logger.setLevel(level if level is not None else LOG_LEVEL)
    if not any(getattr(h, "_semialg", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._semialg = True
        logger.addHandler(handler)
    return logger
