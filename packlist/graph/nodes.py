"""
Pipeline nodes.

Each node takes the current state plus the engine, runs one stage and
returns a state update. Unexpected stage errors are recorded in
``errors`` and the stage's "no information" value is returned, so later
stages still run.
"""

import logging
from typing import Any, Dict

from packlist.context.normalize import missing_required_slots
from packlist.context.schemas import TripContext
from packlist.composer.rationale import compose_followup_question
from packlist.engine import TripEngine
from packlist.extraction.qa import derive_hints_from_qa
from packlist.graph.state import PacklistState
from packlist.season.schemas import SeasonInfo
from packlist.shared.logging.config import log_stage_transition

logger = logging.getLogger(__name__)


def _log_prefix(state: PacklistState, node: str) -> str:
    session_id = state.get("session_id", "unknown")
    return f"[session={session_id}] [graph=packlist] [node={node}] "


def _context_copy(state: PacklistState) -> TripContext:
    ctx = state.get("context")
    return ctx.model_copy(deep=True) if ctx is not None else TripContext()


def _failure(stage: str, e: Exception, fallback: Dict[str, Any]) -> Dict[str, Any]:
    update = dict(fallback)
    update["current_stage"] = stage
    update["errors"] = [f"{stage} stage error: {e}"]
    update["messages"] = [
        {"role": "system", "agent": "packlist", "content": f"{stage} stage failed: {e}"}
    ]
    return update


def normalize_node(state: PacklistState, engine: TripEngine) -> Dict[str, Any]:
    """Build the canonical context from the raw request context."""
    _log = _log_prefix(state, "normalize")
    ctx = engine.resolve_context(state.get("raw_context") or {})
    logger.info(
        f"{_log}Context normalized | legs={len(ctx.destinations)}, "
        f"activities={ctx.activities}, duration={ctx.duration_days}"
    )
    return {
        "context": ctx,
        "current_stage": "normalize",
        "messages": [{"role": "system", "agent": "packlist", "content": "Context normalized"}],
    }


def qa_node(state: PacklistState, engine: TripEngine) -> Dict[str, Any]:
    """Merge form QA answers and the detected home country into the context."""
    _log = _log_prefix(state, "qa")
    qa_input = state.get("qa_input")
    if engine.client is None:
        logger.info(f"{_log}Completion service not configured, skipping QA")
        return {"current_stage": "qa", "qa": None, "hints": {}}

    try:
        ctx = _context_copy(state)
        qa = engine.evaluate_qa(ctx, qa_input=qa_input, utterance=state.get("utterance"))
        engine.detect_home_country(ctx, qa_input)
    except Exception as e:
        logger.exception(f"{_log}QA evaluation failed: {e}")
        return _failure("qa", e, {"qa": None, "hints": {}})

    logger.info(f"{_log}QA merged | evaluated={qa is not None}")
    return {
        "context": ctx,
        "qa": qa.model_dump(by_alias=True) if qa is not None else None,
        "hints": derive_hints_from_qa(qa),
        "current_stage": "qa",
    }


def extract_node(state: PacklistState, engine: TripEngine) -> Dict[str, Any]:
    """Merge slots from the utterance and report missing required slots."""
    _log = _log_prefix(state, "extract")
    ctx = _context_copy(state)
    utterance = state.get("utterance")
    errors = []

    if utterance:
        try:
            engine.merge_slots(ctx, utterance)
        except Exception as e:
            logger.exception(f"{_log}Slot extraction failed: {e}")
            errors.append(f"extract stage error: {e}")

    missing = sorted(missing_required_slots(ctx))
    followup = compose_followup_question(missing, ctx)
    trip_dates = engine.trip_dates(ctx)
    logger.info(f"{_log}Slots merged | missing={missing}")

    update: Dict[str, Any] = {
        "context": ctx,
        "missing": missing,
        "followup_question": followup,
        "trip_dates": trip_dates,
        "current_stage": "extract",
    }
    if errors:
        update["errors"] = errors
    log_stage_transition("slots_extracted", {**state, **update}, logger=logger)
    return update


def season_node(state: PacklistState, engine: TripEngine) -> Dict[str, Any]:
    """Resolve season data for every leg."""
    _log = _log_prefix(state, "season")
    try:
        season = engine.resolve_season(_context_copy(state), use_fallback=True)
    except Exception as e:
        logger.exception(f"{_log}Season lookup failed: {e}")
        return _failure("season", e, {"season": SeasonInfo.empty()})

    logger.info(
        f"{_log}Season resolved | season={season.season}, "
        f"risks={len(season.seasonal_risks)}, flags={season.advice_flags}"
    )
    return {"season": season, "current_stage": "season"}


def products_node(state: PacklistState, engine: TripEngine) -> Dict[str, Any]:
    """Rank catalog products for the context."""
    _log = _log_prefix(state, "products")
    try:
        products = engine.recommend_products(_context_copy(state))
    except Exception as e:
        logger.exception(f"{_log}Product recommendation failed: {e}")
        return _failure("products", e, {"products": []})

    update = {"products": products, "current_stage": "products"}
    log_stage_transition("products_ranked", {**state, **update}, logger=logger)
    return update


def rationale_node(state: PacklistState, engine: TripEngine) -> Dict[str, Any]:
    """Compose the deterministic rationale and close the pipeline."""
    _log = _log_prefix(state, "rationale")
    try:
        rationale = engine.compose_rationale(_context_copy(state), state.get("season"))
    except Exception as e:
        logger.exception(f"{_log}Rationale failed: {e}")
        update = _failure("rationale", e, {"rationale": None})
        update["current_stage"] = "complete"
        return update

    num_errors = len(state.get("errors") or [])
    logger.info(f"{_log}Pipeline complete | errors={num_errors} -> END")
    return {
        "rationale": rationale,
        "current_stage": "complete",
        "messages": [
            {"role": "system", "agent": "packlist", "content": "Pipeline complete."}
        ],
    }
