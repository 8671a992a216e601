"""End-to-end chat analysis pipeline shared by every source format.

The three ``/analyze*`` routes only differ in how the transcript is
enveloped and how the export is described to the model, so they all run
:func:`run_analysis` with a different :class:`SourceFormat`:

1. ``ingestion`` – decode the upload and build the transcript text.
2. ``prompt_builder`` – render the detective instruction and output contract.
3. ``ingestion`` – stage the upload/transcript in the shared staging directory.
4. ``llm_client`` – upload the transcript and ask the model for findings.
5. ``response_contract`` – normalize the raw text into a bounded result.
6. ``cleanup`` – delete the uploaded transcript, then the staged files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List

from fastapi.concurrency import run_in_threadpool

from chat_detective.application.interfaces import AnalysisClientInterface
from chat_detective.domain.models import AnalysisRequest
from chat_detective.services.prompt_builder import build_instruction
from chat_detective.services.response_contract import normalize

from .cleanup import ArtifactScope, with_scoped_artifacts
from .ingestion import ingest, stage_transcript

logger = logging.getLogger("chat_detective.pipeline")
model_response_logger = logging.getLogger("chat_detective.logs.model_response")

TRANSCRIPT_MIME_TYPE = "text/plain"


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the analysis pipeline."""

    order: int
    name: str
    module: str
    summary: str


class AnalysisPipeline:
    """Utility wrapper for documenting the ``/analyze*`` flow."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Ingestion",
            "chat_detective.pipelines.analysis.ingestion",
            "Decode the export and wrap JSON exports in <content> tags.",
        ),
        PipelineStage(
            2,
            "Instruction Assembly",
            "chat_detective.services.prompt_builder",
            "Render the detective instruction with the JSON array contract.",
        ),
        PipelineStage(
            3,
            "Staging",
            "chat_detective.pipelines.analysis.ingestion",
            "Write the upload and transcript to the shared staging directory.",
        ),
        PipelineStage(
            4,
            "Remote Analysis",
            "chat_detective.services.llm_client",
            "Upload the transcript and run the model over it.",
        ),
        PipelineStage(
            5,
            "Normalization",
            "chat_detective.services.response_contract",
            "Extract the JSON array and bound each instance's context.",
        ),
        PipelineStage(
            6,
            "Cleanup",
            "chat_detective.pipelines.analysis.cleanup",
            "Delete the uploaded transcript, then the staged files.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


async def run_analysis(
    request: AnalysisRequest,
    client: AnalysisClientInterface,
    *,
    staging_dir: Path,
) -> List[Any]:
    """Analyze one chat export and return the normalized findings."""

    source = request.source_format
    transcript = ingest(request.raw_transcript_bytes, source)
    instruction = build_instruction(source, request.instruction)
    logger.debug(
        "Transcript ready source=%s length=%s reference_time=%s",
        source.value,
        len(transcript),
        request.reference_timestamp,
    )

    async def body(scope: ArtifactScope) -> List[Any]:
        staged = await run_in_threadpool(
            stage_transcript, request, transcript, staging_dir, scope.add_local
        )
        logger.info("Transcript staged source=%s path=%s", source.value, staged[-1])

        uploaded = scope.add_remote(
            await client.upload_file(
                str(staged[-1]),
                TRANSCRIPT_MIME_TYPE,
                source.display_name,
            )
        )

        raw_response = await client.submit(
            instruction=instruction,
            document=uploaded,
            prompt=request.instruction,
        )
        logger.info("Model analysis completed source=%s", source.value)
        model_response_logger.info("%s | %s", source.value, raw_response)

        result = normalize(raw_response)
        logger.info("Model response normalized source=%s instances=%s", source.value, len(result))
        return result

    return await with_scoped_artifacts(client, body)


__all__ = ["AnalysisPipeline", "PipelineStage", "run_analysis"]
