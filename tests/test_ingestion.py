"""Tests for transcript ingestion and staging."""

from __future__ import annotations

import asyncio
import io
import json
from pathlib import Path

import pytest
from fastapi import UploadFile

from chat_detective.domain.models import AnalysisRequest, SourceFormat
from chat_detective.errors import InputError
from chat_detective.pipelines.analysis.ingestion import (
    ingest,
    parse_reference_timestamp,
    read_upload,
    stage_transcript,
    staged_filename,
)


def _recorder(registered: list[Path]):
    def register(path: Path) -> Path:
        registered.append(path)
        return path

    return register


DISCORD_EXPORT = json.dumps(
    {"messages": [{"author": {"name": "alice"}, "content": "hi", "timestamp": "2024-10-18"}]}
).encode("utf-8")
WHATSAPP_EXPORT = (
    "[18/10/2024, 21:04:11] Alice: are we still on for tonight?\n"
    "[18/10/2024, 21:05:02] Bob: yes, bring the stuff\n"
).encode("utf-8")


@pytest.mark.parametrize("source_format", [SourceFormat.DISCORD, SourceFormat.INSTAGRAM])
def test_json_exports_are_wrapped_verbatim(source_format):
    transcript = ingest(DISCORD_EXPORT, source_format)

    assert transcript == f"<content>\n{DISCORD_EXPORT.decode('utf-8')}\n</content>"


def test_whatsapp_export_is_passed_through():
    assert ingest(WHATSAPP_EXPORT, SourceFormat.WHATSAPP) == WHATSAPP_EXPORT.decode("utf-8")


def test_malformed_input_is_not_rejected():
    transcript = ingest(b"{not json at all \xff", SourceFormat.DISCORD)

    assert transcript.startswith("<content>\n{not json at all ")
    assert "\ufffd" in transcript


@pytest.mark.parametrize("value, expected", [("1729284750", 1729284750), (" 42 ", 42)])
def test_reference_timestamp_is_parsed(value, expected):
    assert parse_reference_timestamp(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "yesterday", "12.5"])
def test_unusable_reference_timestamp_is_an_input_error(value):
    with pytest.raises(InputError):
        parse_reference_timestamp(value)


def test_empty_upload_is_an_input_error():
    upload = UploadFile(file=io.BytesIO(b""), filename="chat.txt")

    with pytest.raises(InputError):
        asyncio.run(read_upload(upload))


def test_upload_is_read_fully():
    upload = UploadFile(file=io.BytesIO(WHATSAPP_EXPORT), filename="chat.txt")

    assert asyncio.run(read_upload(upload)) == WHATSAPP_EXPORT


def test_staged_filename_drops_directories():
    name = staged_filename("../../etc/passwd")

    stamp, fragment, basename = name.split("_", 2)
    assert stamp.isdigit()
    assert len(fragment) == 12
    assert basename == "passwd"


def test_staged_filenames_sharing_a_stamp_do_not_collide():
    first = staged_filename("chat.txt", stamp=1729284750)
    second = staged_filename("chat.txt", stamp=1729284750)

    assert first != second
    assert first.startswith("1729284750_")
    assert second.startswith("1729284750_")


def test_whatsapp_stages_a_single_file(tmp_path):
    request = AnalysisRequest(
        source_format=SourceFormat.WHATSAPP,
        raw_transcript_bytes=WHATSAPP_EXPORT,
        instruction="anything",
        reference_timestamp=0,
        filename="WhatsApp Chat.txt",
    )

    registered: list[Path] = []

    staged = stage_transcript(
        request,
        ingest(WHATSAPP_EXPORT, SourceFormat.WHATSAPP),
        tmp_path,
        _recorder(registered),
    )

    assert staged == registered
    assert len(staged) == 1
    assert staged[0].parent == tmp_path
    assert staged[0].name.endswith("_WhatsApp Chat.txt")
    assert staged[0].read_bytes() == WHATSAPP_EXPORT


def test_json_export_stages_original_and_wrapped_transcript(tmp_path):
    staging_dir = tmp_path / "uploads"
    request = AnalysisRequest(
        source_format=SourceFormat.DISCORD,
        raw_transcript_bytes=DISCORD_EXPORT,
        instruction="anything",
        reference_timestamp=0,
        filename="general.json",
    )
    transcript = ingest(DISCORD_EXPORT, SourceFormat.DISCORD)

    registered: list[Path] = []

    original, wrapped = stage_transcript(request, transcript, staging_dir, _recorder(registered))

    assert registered == [original, wrapped]
    assert original.read_bytes() == DISCORD_EXPORT
    assert original.name.split("_", 1)[0] == wrapped.name.split("_", 1)[0]
    assert wrapped.name.endswith("_wrapped_chat.txt")
    assert wrapped.read_text(encoding="utf-8") == transcript


def test_paths_are_registered_before_they_are_written(tmp_path, monkeypatch):
    request = AnalysisRequest(
        source_format=SourceFormat.DISCORD,
        raw_transcript_bytes=DISCORD_EXPORT,
        instruction="anything",
        reference_timestamp=0,
        filename="general.json",
    )
    registered: list[Path] = []

    def fail_write_text(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "write_text", fail_write_text)

    with pytest.raises(OSError):
        stage_transcript(
            request,
            ingest(DISCORD_EXPORT, SourceFormat.DISCORD),
            tmp_path,
            _recorder(registered),
        )

    assert len(registered) == 2
    assert registered[0].exists()
    assert not registered[1].exists()
