"""Environment-driven configuration (optionally loaded from ``.env``)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from reflow.scheduler_logic.constants import DEFAULT_LIMITS, ReflowLimits


@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    limits: ReflowLimits = field(default_factory=ReflowLimits)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_settings(dotenv_path: str | None = None) -> Settings:
    load_dotenv(dotenv_path)
    log_level = os.environ.get("REFLOW_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"REFLOW_LOG_LEVEL must be a logging level name, got {log_level!r}")
    return Settings(
        log_level=log_level,
        limits=ReflowLimits(
            lookahead_days=_env_int("REFLOW_LOOKAHEAD_DAYS", DEFAULT_LIMITS.lookahead_days),
            clock_iterations=_env_int("REFLOW_MAX_CLOCK_ITERATIONS", DEFAULT_LIMITS.clock_iterations),
            search_iterations=_env_int("REFLOW_MAX_SEARCH_ITERATIONS", DEFAULT_LIMITS.search_iterations),
        ),
    )
