"""
Response parser for assisted extraction.

Handles parsing of completion-service replies, including JSON extraction
from various formats (raw JSON, markdown code blocks, etc.), and shape
validation of the payloads the extraction tiers expect.
"""

import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when response parsing fails."""

    pass


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON content from a completion reply.

    Handles multiple formats:
    - Raw JSON
    - JSON in markdown code blocks (```json ... ```)
    - JSON with leading/trailing whitespace or trailing prose

    Args:
        raw_response: Raw reply string

    Returns:
        Cleaned JSON string ready for parsing
    """
    content = (raw_response or "").strip()

    # Try to extract from markdown code block
    match = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
    if match:
        content = match.group(1).strip()

    if content.startswith("{"):
        depth = 0
        in_string = False
        escaped = False
        for i, char in enumerate(content):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return content[: i + 1]

    # No clear boundaries; let the JSON parser decide
    return content


def parse_json_object(raw_response: str) -> Dict[str, Any]:
    """
    Parse a reply that must contain a single JSON object.

    Raises:
        ParseError: If the reply is not valid JSON or not an object
    """
    json_str = extract_json_from_response(raw_response)
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse response JSON: {e}\nContent: {json_str[:200]}")
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_context_response(raw_response: str) -> Dict[str, Any]:
    """
    Parse an enrichment reply of the form {"context": {...}}.

    Returns:
        The inner context mapping

    Raises:
        ParseError: If JSON parsing fails or the context key is missing/invalid
    """
    data = parse_json_object(raw_response)
    if "context" not in data:
        raise ParseError(f"Response missing required key 'context': {sorted(data.keys())}")
    context = data["context"]
    if not isinstance(context, dict):
        raise ParseError(f"'context' must be an object, got {type(context).__name__}")
    return context
