"""
Packlist graph construction.

Builds the graph that sequences the pipeline stages:
normalize -> qa -> extract -> season -> products -> rationale -> END,
with a cancellation check after every stage.
"""

import logging
from functools import partial
from typing import Any, Callable, Dict, Optional

from langgraph.graph import StateGraph, END

from packlist.engine import TripEngine
from packlist.graph.nodes import (
    extract_node,
    normalize_node,
    products_node,
    qa_node,
    rationale_node,
    season_node,
)
from packlist.graph.router import route_after_stage
from packlist.graph.state import PacklistState

logger = logging.getLogger(__name__)

STAGES = (
    ("normalize", normalize_node),
    ("qa", qa_node),
    ("extract", extract_node),
    ("season", season_node),
    ("products", products_node),
    ("rationale", rationale_node),
)


def create_packlist_graph(engine: TripEngine):
    """
    Create and compile the packlist graph.

    Args:
        engine: Engine whose caches and client the stages use

    Returns:
        Compiled StateGraph ready for invocation
    """
    workflow = StateGraph(PacklistState)

    for name, node in STAGES:
        workflow.add_node(name, partial(node, engine=engine))

    workflow.set_entry_point(STAGES[0][0])

    for (name, _), (next_name, _) in zip(STAGES, STAGES[1:]):
        workflow.add_conditional_edges(
            name,
            route_after_stage,
            {"continue": next_name, "cancelled": END},
        )
    workflow.add_edge(STAGES[-1][0], END)

    return workflow.compile()


def run_packlist(
    engine: TripEngine,
    raw_context: Optional[Any] = None,
    utterance: Optional[str] = None,
    qa_input: Optional[Dict[str, Any]] = None,
    session_id: Optional[str] = None,
    is_cancelled: Optional[Callable[[], bool]] = None,
    graph=None,
) -> Dict[str, Any]:
    """
    Run the full pipeline for one request.

    Args:
        engine: Engine to run against
        raw_context: Raw context from the client (dict or JSON string)
        utterance: Free-text message
        qa_input: Four-field form answers
        session_id: Identifier used in log lines
        is_cancelled: Callback polled between stages
        graph: Pre-compiled graph (built from ``engine`` when omitted)

    Returns:
        Final state with context, missing, followup_question, season,
        products, rationale, errors and messages
    """
    app = graph or create_packlist_graph(engine)
    initial_state: PacklistState = {
        "raw_context": raw_context or {},
        "utterance": utterance,
        "qa_input": qa_input,
        "is_cancelled": is_cancelled,
        "context": None,
        "qa": None,
        "hints": {},
        "missing": [],
        "followup_question": None,
        "trip_dates": {"start_date": None, "end_date": None},
        "season": None,
        "products": [],
        "rationale": None,
        "current_stage": "start",
        "errors": [],
        "messages": [],
        "session_id": session_id or "unknown",
    }
    _log = f"[session={initial_state['session_id']}] [graph=packlist] "
    logger.info(f"{_log}Invoking pipeline | utterance={bool(utterance)}, form={bool(qa_input)}")

    final_state = dict(app.invoke(initial_state))
    final_state["cancelled"] = final_state.get("current_stage") != "complete"
    final_state.pop("is_cancelled", None)
    return final_state
