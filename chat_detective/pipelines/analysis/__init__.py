"""Chat analysis pipeline package.

Modules are organised by the order in which the ``/analyze*`` routes execute:

1. `ingestion` – read the upload, build and stage the transcript.
2. `flow` – run the shared pipeline and describe its stages.
3. `cleanup` – release staged and uploaded transcripts.

Prompt rendering, the Bedrock client and response normalization live in
``chat_detective.services`` because they do not depend on the HTTP layer.
"""

from .cleanup import ArtifactScope, with_scoped_artifacts
from .flow import AnalysisPipeline, PipelineStage, run_analysis
from .ingestion import ingest, parse_reference_timestamp, read_upload, stage_transcript

__all__ = [
    "AnalysisPipeline",
    "ArtifactScope",
    "PipelineStage",
    "ingest",
    "parse_reference_timestamp",
    "read_upload",
    "run_analysis",
    "stage_transcript",
    "with_scoped_artifacts",
]
