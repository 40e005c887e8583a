"""LangGraph pipeline wiring the engine stages."""

from packlist.graph.state import PacklistState
from packlist.graph.build import create_packlist_graph, run_packlist

__all__ = ["PacklistState", "create_packlist_graph", "run_packlist"]
