"""Reflow engine: dependency ordering, shift calendar, working clock,
greedy placement and schedule validation."""

from .orchestrator import build_text_summary, reflow, try_reflow
from .validation import validate_schedule

__all__ = ["build_text_summary", "reflow", "try_reflow", "validate_schedule"]
