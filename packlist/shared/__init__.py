"""
Shared infrastructure for the packlist engine.

Modules:
- config: Engine configuration (env + overrides)
- llm: OpenAI client with retry logic
- logging: Structured JSON logging
- result: Ok / Empty / Unavailable lookup results
- text: Diacritic-insensitive folding helpers
"""

from packlist.shared.config import EngineConfig, get_config
from packlist.shared.llm.client import get_cached_client, call_llm
from packlist.shared.logging.config import setup_logging, log_stage_transition

__all__ = [
    "EngineConfig",
    "get_config",
    "get_cached_client",
    "call_llm",
    "setup_logging",
    "log_stage_transition",
]
