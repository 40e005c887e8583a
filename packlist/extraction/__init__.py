"""Slot extraction: deterministic patterns, assisted enrichment and QA evaluation."""

from packlist.extraction.extractor import extract_slots
from packlist.extraction.patterns import scan_utterance
from packlist.extraction.qa import (
    QAResult,
    HomeCountry,
    evaluate_utterance,
    evaluate_form,
    merge_qa_into_context,
    detect_home_country,
    apply_home_country,
)
from packlist.extraction.response_parser import ParseError, extract_json_from_response

__all__ = [
    "extract_slots",
    "scan_utterance",
    "QAResult",
    "HomeCountry",
    "evaluate_utterance",
    "evaluate_form",
    "merge_qa_into_context",
    "detect_home_country",
    "apply_home_country",
    "ParseError",
    "extract_json_from_response",
]
