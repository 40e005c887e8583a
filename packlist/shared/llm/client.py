"""
OpenAI client with retry logic.

Provides a cached client instance and wrappers for chat completion calls
with automatic retries using tenacity. Structured calls request a strict
JSON schema and fall back to plain JSON mode when the model rejects it.
"""

import logging
from typing import Any, Dict, List, Optional

from openai import (
    APIConnectionError,
    APITimeoutError,
    BadRequestError,
    InternalServerError,
    OpenAI,
    RateLimitError,
)
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from packlist.shared.config import EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

# Errors worth another attempt; everything else surfaces immediately
_TRANSIENT_ERRORS = (
    APIConnectionError,
    APITimeoutError,
    RateLimitError,
    InternalServerError,
)

# Module-level cache for OpenAI client, keyed by API key
_client: Optional[OpenAI] = None
_client_key: Optional[str] = None


def is_llm_available(config: EngineConfig) -> bool:
    """Whether assisted features may call the completion service."""
    return config.llm_enabled


def get_cached_client(api_key: str) -> OpenAI:
    """
    Returns a cached instance of the OpenAI client.

    The client is created once per API key and reused for all subsequent calls.

    Raises:
        ValueError: If no API key is given
    """
    global _client, _client_key
    if not api_key:
        raise ValueError(
            "OPENAI_API_KEY is not set. "
            "Assisted extraction requires a completion service key."
        )
    if _client is None or _client_key != api_key:
        _client = OpenAI(api_key=api_key)
        _client_key = api_key
    return _client


def resolve_client(config: EngineConfig, client: Optional[OpenAI] = None) -> Optional[OpenAI]:
    """
    Pick the client for an assisted call.

    An explicitly injected client always wins; otherwise a cached client is
    built from the configured key. Returns None when assisted features are off.
    """
    if client is not None:
        return client
    if not is_llm_available(config):
        return None
    return get_cached_client(config.openai_api_key)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    reraise=True,
)
def call_llm(
    messages: List[Dict[str, str]],
    client: OpenAI,
    model: str = DEFAULT_MODEL,
    temperature: float = 0,
    response_format: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Call the OpenAI Chat Completion API with automatic retries.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        client: OpenAI client instance
        model: Model identifier to use
        temperature: Sampling temperature
        response_format: Optional response_format payload (JSON modes)

    Returns:
        The assistant's response content as a string (empty when the reply
        carries no message).

    Raises:
        openai.OpenAIError: If the call fails (transient errors after all retries).
    """
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
    }
    if response_format is not None:
        kwargs["response_format"] = response_format

    response = client.chat.completions.create(**kwargs)

    # No choices or no message reads as an empty reply; callers reject it when parsing
    choices = getattr(response, "choices", None) or []
    message = getattr(choices[0], "message", None) if choices else None
    if message is None:
        logger.warning(f"Completion reply without a message (model={model})")
        return ""
    content = message.content or ""
    return content.strip()


def call_llm_json(
    system_prompt: str,
    user_prompt: str,
    json_schema: Dict[str, Any],
    client: OpenAI,
    model: str = DEFAULT_MODEL,
    schema_name: str = "extraction",
) -> str:
    """
    Request a JSON answer that follows the given schema.

    Tries strict ``json_schema`` mode first. If the model refuses the
    schema (HTTP 400), retries once in plain ``json_object`` mode with the
    instructions folded into a single user message.

    Args:
        system_prompt: Instructions for the model
        user_prompt: The user content to analyze
        json_schema: JSON schema the answer should follow
        client: OpenAI client instance
        model: Model identifier to use
        schema_name: Name reported to the API for the schema

    Returns:
        Raw response text (expected to be JSON)
    """
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
    try:
        return call_llm(
            messages,
            client=client,
            model=model,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": json_schema, "strict": True},
            },
        )
    except BadRequestError as e:
        logger.info(f"Strict schema rejected ({e.status_code}), retrying in json_object mode")

    fallback_messages = [
        {"role": "system", "content": "Return ONLY valid JSON, without any text or explanation."},
        {
            "role": "user",
            "content": f"{system_prompt}\n\n{user_prompt}\n\nAnswer with JSON only.",
        },
    ]
    return call_llm(
        fallback_messages,
        client=client,
        model=model,
        response_format={"type": "json_object"},
    )
