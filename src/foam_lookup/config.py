"""Environment-driven settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

__all__ = ["Settings", "DEFAULT_LOG_LEVEL", "DEFAULT_WRITE_PRECISION"]

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_WRITE_PRECISION = 6

_LOG_LEVEL_VAR = "FOAM_LOOKUP_LOG_LEVEL"
_PRECISION_VAR = "FOAM_LOOKUP_WRITE_PRECISION"


@dataclass(frozen=True)
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    write_precision: int = DEFAULT_WRITE_PRECISION

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``FOAM_LOOKUP_*`` variables.

        Invalid values fall back to the defaults with a warning.
        """
        env = os.environ if environ is None else environ

        level = env.get(_LOG_LEVEL_VAR, DEFAULT_LOG_LEVEL).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            logger.warning("Ignoring %s=%r: unknown log level", _LOG_LEVEL_VAR, level)
            level = DEFAULT_LOG_LEVEL

        precision = DEFAULT_WRITE_PRECISION
        raw = env.get(_PRECISION_VAR)
        if raw is not None:
            try:
                precision = int(raw)
                if precision < 1:
                    raise ValueError(raw)
            except ValueError:
                logger.warning("Ignoring %s=%r: expected a positive integer", _PRECISION_VAR, raw)
                precision = DEFAULT_WRITE_PRECISION

        return cls(log_level=level, write_precision=precision)
