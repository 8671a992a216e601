"""Chat analysis endpoints.

One POST route per supported export format (``/analyzeDiscord``,
``/analyzeInstagram``, ``/analyzeWhatsapp``). All of them accept the same
multipart form and run the shared pipeline in
``chat_detective.pipelines.analysis.flow``:

1. Validate the form fields and read the uploaded export.
2. Build the transcript and the detective instruction for the format.
3. Stage and upload the transcript, then ask the model for findings.
4. Normalize the model's JSON array and clean up every temporary artifact.
"""

import logging
from typing import Any, Callable, Coroutine, List, Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse

from chat_detective.controllers.dependencies import AnalysisClientDep, StagingDirDep
from chat_detective.domain.models import AnalysisRequest, SourceFormat
from chat_detective.errors import AnalysisError, InputError
from chat_detective.pipelines.analysis import (
    AnalysisPipeline,
    parse_reference_timestamp,
    read_upload,
    run_analysis,
)
from chat_detective.telemetry import observe_analysis
from chat_detective.views import AnalysisInstance, ErrorResponse

router = APIRouter(tags=["analysis"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(AnalysisPipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""

_TIME_FORM = Form(None)
_PROMPT_FORM = Form(None)
_CHAT_FILE_UPLOAD = File(None)

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Missing or invalid form fields"},
    422: {"model": ErrorResponse, "description": "Model output could not be normalized"},
    502: {"model": ErrorResponse, "description": "Remote analysis call failed"},
    504: {"model": ErrorResponse, "description": "Remote analysis call timed out"},
}


async def analyze_chat(
    source_format: SourceFormat,
    client: AnalysisClientDep,
    staging_dir: StagingDirDep,
    time: Optional[str],
    prompt: Optional[str],
    chat_file: Optional[UploadFile],
) -> JSONResponse:
    """Analyze an uploaded chat export with the remote model."""

    route = source_format.route_path
    logger.info("Received %s request", route)
    try:
        if chat_file is None or not prompt or not prompt.strip():
            raise InputError("Missing required fields")
        reference_timestamp = parse_reference_timestamp(time)
        logger.debug("Timestamp: %s, Prompt: %s", reference_timestamp, prompt)

        request = AnalysisRequest(
            source_format=source_format,
            raw_transcript_bytes=await read_upload(chat_file),
            instruction=prompt,
            reference_timestamp=reference_timestamp,
            filename=chat_file.filename or "chat.txt",
        )
        result = await run_analysis(request, client, staging_dir=staging_dir)
    except AnalysisError as exc:
        logger.error("Error in %s: %s (%s)", route, exc, exc.error_code)
        observe_analysis(source_format.value, exc.error_code)
        raise
    except Exception:
        logger.exception("Error in %s", route)
        observe_analysis(source_format.value, "INTERNAL_ERROR")
        raise

    observe_analysis(source_format.value, "success", len(result))
    return JSONResponse(content=result)


def _endpoint_for(
    source_format: SourceFormat,
) -> Callable[..., Coroutine[Any, Any, JSONResponse]]:
    async def endpoint(
        client: AnalysisClientDep,
        staging_dir: StagingDirDep,
        time: Optional[str] = _TIME_FORM,
        prompt: Optional[str] = _PROMPT_FORM,
        file: Optional[UploadFile] = _CHAT_FILE_UPLOAD,
    ) -> JSONResponse:
        return await analyze_chat(source_format, client, staging_dir, time, prompt, file)

    endpoint.__name__ = f"analyze_{source_format.value}"
    endpoint.__doc__ = f"Analyze an exported {source_format.label} chat."
    return endpoint


for _source_format in SourceFormat:
    router.add_api_route(
        _source_format.route_path,
        _endpoint_for(_source_format),
        methods=["POST"],
        response_model=List[AnalysisInstance],
        response_model_by_alias=True,
        responses=_ERROR_RESPONSES,
        name=f"analyze_{_source_format.value}",
    )


__all__ = ["PIPELINE_STAGES", "analyze_chat", "router"]
