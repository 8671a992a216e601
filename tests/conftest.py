"""Shared fixtures: a scripted stand-in for the remote analysis client."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent))

from chat_fakes import ScriptedAnalysisClient  # noqa: E402


@pytest.fixture
def scripted_client() -> ScriptedAnalysisClient:
    return ScriptedAnalysisClient()
