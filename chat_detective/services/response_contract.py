"""Normalization of raw model output into an analysis result.

The model is asked for a bare JSON array, but nothing stops it from wrapping
the array in Markdown fences or chatting before and after it. Every response
goes through :func:`normalize` so the controllers only ever hand out a parsed
list whose context arrays respect the size ceiling.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from chat_detective.errors import InvalidJson, MalformedInstance, NoJsonArrayFound
from chat_detective.services.prompt_builder import MAX_CONTEXT_MESSAGES

logger = logging.getLogger(__name__)

CONTEXT_BEFORE_KEY = "context-before"
CONTEXT_AFTER_KEY = "context-after"

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code fences and slice from the first '[' to the last ']'."""

    cleaned = _FENCE_PATTERN.sub("", payload.strip()).strip()

    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start == -1 or end == -1 or end < start:
        raise NoJsonArrayFound("Model response does not contain a JSON array.")

    return cleaned[start : end + 1]


def _bound_instance(index: int, instance: Any) -> Any:
    """Keep the last N messages before and the first N after the flagged one."""

    if not isinstance(instance, dict):
        raise MalformedInstance(
            f"Instance {index} is not a JSON object.", index=index
        )

    for key in (CONTEXT_BEFORE_KEY, CONTEXT_AFTER_KEY):
        if key not in instance:
            raise MalformedInstance(
                f"Instance {index} is missing '{key}'.", index=index
            )
        if not isinstance(instance[key], list):
            raise MalformedInstance(
                f"Instance {index} has a non-array '{key}'.", index=index
            )

    instance[CONTEXT_BEFORE_KEY] = instance[CONTEXT_BEFORE_KEY][-MAX_CONTEXT_MESSAGES:]
    instance[CONTEXT_AFTER_KEY] = instance[CONTEXT_AFTER_KEY][:MAX_CONTEXT_MESSAGES]
    return instance


def normalize(raw_text: str) -> List[Any]:
    """Turn untrusted model text into a bounded list of analysis instances.

    Only the context arrays are touched. Instance ids, the flagged pair and
    timestamps are passed through as the model produced them, and context
    arrays shorter than the requested minimum are left alone.

    Raises:
        NoJsonArrayFound: no ``[`` ... ``]`` span exists in the text.
        InvalidJson: the span is not valid JSON.
        MalformedInstance: an instance lacks a usable context array.
    """

    sanitized = _clean_json_payload(raw_text or "")

    try:
        parsed = json.loads(sanitized)
    except json.JSONDecodeError as exc:
        logger.error("JSON parsing error: %s", exc)
        logger.error("Sanitized model response: %s", sanitized)
        raise InvalidJson(
            "Failed to parse model response as JSON.", sanitized=sanitized
        ) from exc

    return [_bound_instance(index, instance) for index, instance in enumerate(parsed)]


__all__ = [
    "CONTEXT_AFTER_KEY",
    "CONTEXT_BEFORE_KEY",
    "normalize",
]
