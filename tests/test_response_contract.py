"""Tests for normalizing raw model text into analysis results."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from chat_detective.errors import (
    InvalidJson,
    MalformedInstance,
    NoJsonArrayFound,
    NormalizationError,
)
from chat_detective.services.response_contract import normalize

sys.path.insert(0, str(Path(__file__).resolve().parent))

from chat_fakes import analysis_instance, chat_message  # noqa: E402


def test_extracts_array_surrounded_by_prose_and_fences():
    payload = [analysis_instance(1), analysis_instance(2)]
    raw = (
        "Sure! Here are the findings:\n"
        f"```json\n{json.dumps(payload, indent=2)}\n```\n"
        "Let me know if you need anything else."
    )

    assert normalize(raw) == payload


def test_fenced_empty_array_is_a_valid_result():
    assert normalize("```json\n[]\n```") == []


def test_uppercase_fence_tag_is_stripped():
    assert normalize("```JSON\n[]\n```") == []


def test_fence_markers_inside_the_text_are_removed():
    raw = '[{"instance_ID": 1, "context-before": [], "flagged": [], "context-after": [], "note": "```"}]'

    result = normalize(raw)

    assert result[0]["note"] == ""


def test_context_before_keeps_the_last_ten_messages():
    instance = analysis_instance(before=11, after=2)

    result = normalize(json.dumps([instance]))

    assert len(result) == 1
    assert result[0]["context-before"] == [chat_message(i) for i in range(1, 11)]
    assert result[0]["context-after"] == [chat_message(200), chat_message(201)]


def test_context_after_keeps_the_first_ten_messages():
    instance = analysis_instance(before=0, after=15)

    result = normalize(json.dumps([instance]))

    assert result[0]["context-before"] == []
    assert result[0]["context-after"] == [chat_message(200 + i) for i in range(10)]


def test_short_context_is_not_padded_and_other_fields_pass_through():
    instance = analysis_instance(before=1, after=0)
    instance["flagged"].append(chat_message(300))
    instance["severity"] = "high"

    result = normalize(json.dumps([instance]))

    assert result == [instance]


def test_normalizing_twice_is_stable():
    raw = json.dumps([analysis_instance(1, before=14, after=12), analysis_instance(2)])

    once = normalize(raw)
    twice = normalize(json.dumps(once))

    assert twice == once


def test_text_without_brackets_is_rejected():
    with pytest.raises(NoJsonArrayFound):
        normalize("no brackets here")


def test_closing_bracket_before_opening_bracket_is_rejected():
    with pytest.raises(NoJsonArrayFound):
        normalize("oops ] and then [")


def test_empty_text_is_rejected():
    with pytest.raises(NoJsonArrayFound):
        normalize("")


def test_invalid_json_keeps_the_sanitized_text():
    with pytest.raises(InvalidJson) as exc_info:
        normalize('Result: ```json\n[{"instance_ID": 1,}]\n```')

    assert exc_info.value.sanitized == '[{"instance_ID": 1,}]'
    assert exc_info.value.error_code == "INVALID_JSON"


def test_missing_context_after_is_malformed_not_defaulted():
    instance = analysis_instance(2)
    del instance["context-after"]
    raw = json.dumps([analysis_instance(1), instance])

    with pytest.raises(MalformedInstance) as exc_info:
        normalize(raw)

    assert exc_info.value.index == 1


def test_missing_context_before_is_malformed():
    instance = analysis_instance()
    del instance["context-before"]

    with pytest.raises(MalformedInstance):
        normalize(json.dumps([instance]))


def test_null_context_is_malformed():
    instance = analysis_instance()
    instance["context-before"] = None

    with pytest.raises(MalformedInstance):
        normalize(json.dumps([instance]))


def test_non_object_instance_is_malformed():
    with pytest.raises(MalformedInstance):
        normalize('["just a string"]')


def test_all_failures_share_the_normalization_base():
    for error in (NoJsonArrayFound, InvalidJson, MalformedInstance):
        assert issubclass(error, NormalizationError)
        assert error.status_code == 422
