"""LLM client utilities."""

from packlist.shared.llm.client import (
    get_cached_client,
    resolve_client,
    call_llm,
    call_llm_json,
    is_llm_available,
)

__all__ = [
    "get_cached_client",
    "resolve_client",
    "call_llm",
    "call_llm_json",
    "is_llm_available",
]
