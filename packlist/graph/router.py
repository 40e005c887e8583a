"""
Routing logic for the packlist graph.

After every stage the pipeline either continues with the next stage or
stops early because the request was cancelled.
"""

import logging
from typing import Literal

from packlist.graph.state import PacklistState

logger = logging.getLogger(__name__)


def is_cancelled(state: PacklistState) -> bool:
    """Ask the request's cancellation callback, if one was given."""
    check = state.get("is_cancelled")
    if check is None:
        return False
    try:
        return bool(check())
    except Exception as e:
        logger.warning(f"Cancellation check failed, continuing: {e}")
        return False


def route_after_stage(state: PacklistState) -> Literal["continue", "cancelled"]:
    """
    Decide whether the pipeline proceeds.

    Args:
        state: Current pipeline state

    Returns:
        "cancelled" when the cancellation callback reports cancellation,
        otherwise "continue"
    """
    session_id = state.get("session_id", "unknown")
    stage = state.get("current_stage", "unknown")
    _log = f"[session={session_id}] [graph=packlist] [router=route_after_stage] "

    if is_cancelled(state):
        logger.info(f"{_log}Request cancelled after '{stage}' -> END")
        return "cancelled"

    logger.debug(f"{_log}Continuing after '{stage}'")
    return "continue"
