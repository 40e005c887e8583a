"""Logging configuration and utilities."""

from packlist.shared.logging.config import (
    StructuredFormatter,
    log_stage_transition,
    setup_logging,
    summarize_state,
)

__all__ = [
    "setup_logging",
    "log_stage_transition",
    "summarize_state",
    "StructuredFormatter",
]
