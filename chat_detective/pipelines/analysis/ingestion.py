"""Request ingestion helpers (Stage 01 of the analysis pipeline)."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable
from uuid import uuid4

from fastapi import UploadFile

from chat_detective.domain.models import AnalysisRequest, SourceFormat
from chat_detective.errors import InputError

CONTENT_OPEN_TAG = "<content>"
CONTENT_CLOSE_TAG = "</content>"
WRAPPED_TRANSCRIPT_NAME = "wrapped_chat.txt"


def ingest(raw_bytes: bytes, source_format: SourceFormat) -> str:
    """Produce the transcript text submitted to the model.

    JSON exports are enveloped so the model can tell file content apart from
    instructions; WhatsApp text goes through untouched. Nothing is parsed.
    """

    text = raw_bytes.decode("utf-8", errors="replace")
    if source_format.wraps_content:
        return f"{CONTENT_OPEN_TAG}\n{text}\n{CONTENT_CLOSE_TAG}"
    return text


async def read_upload(upload: UploadFile) -> bytes:
    """Load the upload fully into memory, rejecting empty payloads."""

    data = await upload.read()
    await upload.close()

    if not data:
        raise InputError("Uploaded chat file is empty")
    return data


def parse_reference_timestamp(value: str | None) -> int:
    """Parse the ``time`` form field into an integer timestamp."""

    if value is None or not value.strip():
        raise InputError("Missing required fields")
    try:
        return int(value.strip())
    except ValueError:
        raise InputError("Field 'time' must be an integer timestamp") from None


def staged_filename(original: str | None, stamp: int | None = None) -> str:
    """Prefix the upload's basename with a request timestamp and a random fragment."""

    basename = Path(original or "").name or "chat.txt"
    if stamp is None:
        stamp = time.time_ns()
    return f"{stamp}_{uuid4().hex[:12]}_{basename}"


def stage_transcript(
    request: AnalysisRequest,
    transcript: str,
    staging_dir: Path,
    register: Callable[[Path], Path],
) -> list[Path]:
    """Write the upload (and the enveloped transcript, if any) to disk.

    Each path is handed to ``register`` before it is written, so a failed
    write still leaves every touched file owned by the caller's cleanup.
    Returns every file written, the one to hand to the model last.
    """

    staging_dir.mkdir(parents=True, exist_ok=True)
    stamp = time.time_ns()

    original_path = register(staging_dir / staged_filename(request.filename, stamp))
    original_path.write_bytes(request.raw_transcript_bytes)
    if not request.source_format.wraps_content:
        return [original_path]

    wrapped_path = register(staging_dir / staged_filename(WRAPPED_TRANSCRIPT_NAME, stamp))
    wrapped_path.write_text(transcript, encoding="utf-8")
    return [original_path, wrapped_path]


__all__ = [
    "CONTENT_CLOSE_TAG",
    "CONTENT_OPEN_TAG",
    "ingest",
    "parse_reference_timestamp",
    "read_upload",
    "stage_transcript",
    "staged_filename",
]
