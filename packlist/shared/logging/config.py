"""
Logging setup for the packlist engine.

Log lines are JSON objects so pipeline runs can be filtered per session or
stage. Pipeline nodes report stage transitions with log_stage_transition(),
which attaches a compact summary of the graph state to the record.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER = "packlist"

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("httpcore", "httpx", "openai")

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """
    Render records as single-line JSON.

    Keys: timestamp (UTC, ISO-8601), level, logger, message, and, when
    present, source location for warnings and above, the ``extra`` payload
    attached by log_stage_transition(), and the formatted exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.levelno >= logging.WARNING and record.lineno:
            entry["where"] = f"{record.module}:{record.lineno}"

        payload = getattr(record, "extra", None)
        if payload:
            entry["extra"] = payload
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = ROOT_LOGGER,
    json_output: bool = True,
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the packlist logger.

    Calling it again replaces the handlers instead of stacking them.

    Args:
        level: Threshold for the packlist logger
        log_file: Also append log lines to this file
        logger_name: Logger to configure
        json_output: JSON lines (default) or plain text for local runs

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = StructuredFormatter() if json_output else logging.Formatter(_TEXT_FORMAT)

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def summarize_state(state: Dict[str, Any]) -> Dict[str, Any]:
    """Counts and identifiers of a pipeline state, safe to log."""
    context = state.get("context")
    season = state.get("season")
    return {
        "session_id": state.get("session_id"),
        "stage": state.get("current_stage"),
        "legs": len(context.destinations) if context is not None else 0,
        "missing": sorted(state.get("missing") or []),
        "season": season.season if season is not None else None,
        "products": len(state.get("products") or []),
        "errors": len(state.get("errors") or []),
    }


def log_stage_transition(
    event: str,
    state: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Emit one INFO record describing a pipeline stage transition.

    Args:
        event: Event name, e.g. "slots_extracted" or "products_ranked"
        state: Pipeline state after the stage
        extra: Additional fields for the record
        logger: Target logger (defaults to the packlist root logger)
    """
    logger = logger or logging.getLogger(ROOT_LOGGER)
    if not logger.isEnabledFor(logging.INFO):
        return

    payload: Dict[str, Any] = {"event": event, "state_summary": summarize_state(state)}
    if extra:
        payload["extra"] = extra

    logger.info(f"Stage transition: {event}", extra={"extra": payload})
