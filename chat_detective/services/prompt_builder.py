"""Helpers to construct the system instruction for the chat analysis model.

Given a source format and the investigator's prompt, we emit a single
instruction that frames the model as a detective's assistant, describes how
the uploaded chat export is laid out, and spells out the strict JSON array
contract that :mod:`chat_detective.services.response_contract` expects back.
"""

from __future__ import annotations

from chat_detective.domain.models import SourceFormat

MAX_INSTANCES = 10
MIN_CONTEXT_MESSAGES = 3
MAX_CONTEXT_MESSAGES = 10
ANALYZER_AUTHOR = "AI-ANALYZER"

# How each export looks once it reaches the model.
INPUT_DESCRIPTIONS = {
    SourceFormat.DISCORD: (
        "You will be given Discord chat data in a text file containing JSON "
        "content wrapped within <content> tags."
    ),
    SourceFormat.INSTAGRAM: (
        "You will be given Instagram chat data in a text file containing JSON "
        "content wrapped within <content> tags.\n\n"
        "The data will look like this:\n\n"
        "<content>\n"
        "{\n"
        '  "participants": [{ "name": "username" }, ...],\n'
        '  "messages": [\n'
        "    {\n"
        '      "sender_name": "username",\n'
        '      "timestamp_ms": 1726329574750,\n'
        '      "content": "message",\n'
        '      "is_geoblocked_for_viewer": false\n'
        "    },\n"
        "    ...\n"
        "  ],\n"
        '  "title": "Chat Title",\n'
        "  ...\n"
        "}\n"
        "</content>"
    ),
    SourceFormat.WHATSAPP: (
        "You will be given WhatsApp chat data as plain text, one message per "
        "line, in the following format:\n\n"
        "[date, time] username: message"
    ),
}

_OUTPUT_LAYOUT = f"""[
  {{
    "instance_ID": 1,
    "context-before": [
      {{"time": 1729284750, "author": "username", "message": "message content"}}
    ],
    "flagged": [
      {{"time": 1729284750, "author": "username", "message": "message content"}},
      {{"time": 0, "author": "{ANALYZER_AUTHOR}", "message": "Explanation of why this message is flagged"}}
    ],
    "context-after": [
      {{"time": 1729284750, "author": "username", "message": "message content"}}
    ]
  }}
]"""


def _output_rules() -> list[str]:
    return [
        "ONLY OUTPUT THE JSON ARRAY containing your findings based on the analysis of the provided chat data.",
        "Do NOT include any sample data, Markdown formatting, code fences (like ```), headers, footers, explanations, or any additional text.",
        f"The MAXIMUM NUMBER OF INSTANCES YOU ARE ALLOWED TO LIST IS {MAX_INSTANCES}.",
        (
            'Limit the number of messages in "context-before" and "context-after" '
            f"to between {MIN_CONTEXT_MESSAGES} and {MAX_CONTEXT_MESSAGES} messages each, "
            "ordered from oldest to newest."
        ),
        (
            'The "flagged" array holds ONLY ONE FLAGGED MESSAGE, the one that meets the '
            "criteria of the prompt, followed by one entry with "
            f'"time": 0 and "author": "{ANALYZER_AUTHOR}" whose "message" explains why it was flagged.'
        ),
        'If a message has an attachment (e.g., image, file), describe the attachment in the "message" field, including its caption if it has one.',
        'Ensure that your response is valid JSON and follows the exact structure provided. Escape double quotes inside strings as \\".',
    ]


def build_instruction(source_format: SourceFormat, user_prompt: str) -> str:
    """Compose the system instruction for one analysis request."""

    rules = "\n".join(f"- {rule}" for rule in _output_rules())

    return (
        "You are a professional detective's assistant. "
        f"{INPUT_DESCRIPTIONS[source_format]}\n\n"
        "Your task is to analyze the chat data based on the following prompt:\n\n"
        f'"{user_prompt}"\n\n'
        "IMPORTANT INSTRUCTIONS:\n\n"
        f"{rules}\n\n"
        "Output format (for reference only, do NOT include it in your output):\n\n"
        f"{_OUTPUT_LAYOUT}\n\n"
        "Remember:\n\n"
        "- Do NOT include any sample data in your output.\n"
        "- ONLY OUTPUT THE JSON ARRAY."
    )


__all__ = [
    "ANALYZER_AUTHOR",
    "INPUT_DESCRIPTIONS",
    "MAX_CONTEXT_MESSAGES",
    "MAX_INSTANCES",
    "MIN_CONTEXT_MESSAGES",
    "build_instruction",
]
