"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends

from chat_detective.application.interfaces import AnalysisClientInterface
from chat_detective.config.settings import settings
from chat_detective.services.llm_client import BedrockAnalysisClient


@lru_cache(maxsize=1)
def get_analysis_client() -> AnalysisClientInterface:
    """Return the process-wide Bedrock client, built on first use."""

    return BedrockAnalysisClient()


def get_staging_dir() -> Path:
    """Directory where uploads are staged while a request is in flight."""

    return Path(settings.uploads.staging_dir)


AnalysisClientDep = Annotated[AnalysisClientInterface, Depends(get_analysis_client)]
StagingDirDep = Annotated[Path, Depends(get_staging_dir)]


__all__ = [
    "AnalysisClientDep",
    "StagingDirDep",
    "get_analysis_client",
    "get_staging_dir",
]
