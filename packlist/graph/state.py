"""
Pipeline state schema.

Defines the state that flows through the packlist graph, carrying the
request inputs, the resolved context and each stage's output.
"""

from typing import Annotated, Any, Callable, Dict, List, Optional, TypedDict
import operator

from packlist.context.schemas import TripContext
from packlist.season.schemas import SeasonInfo


class PacklistState(TypedDict, total=False):
    """
    State schema for the packlist graph.

    Stages replace ``context`` with an updated copy instead of mutating
    the previous one.
    """

    # Request inputs
    raw_context: Optional[Any]
    utterance: Optional[str]
    qa_input: Optional[Dict[str, Any]]
    is_cancelled: Optional[Callable[[], bool]]

    # Stage outputs
    context: Optional[TripContext]
    qa: Optional[Dict[str, Any]]
    hints: Dict[str, Any]
    missing: List[str]
    followup_question: Optional[str]
    trip_dates: Dict[str, Optional[str]]
    season: Optional[SeasonInfo]
    products: List[Dict[str, Any]]
    rationale: Optional[str]

    # Tracking
    current_stage: str
    cancelled: bool
    errors: Annotated[List[str], operator.add]
    messages: Annotated[List[dict], operator.add]

    # Session tracking
    session_id: Optional[str]
