"""Deterministic rationale and follow-up text."""

from packlist.composer.rationale import compose_rationale, compose_followup_question, list_countries

__all__ = ["compose_rationale", "compose_followup_question", "list_countries"]
