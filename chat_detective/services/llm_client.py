"""Bedrock-backed client for chat transcript analysis.

Transcripts are uploaded to S3 and handed to the Bedrock ``converse`` API as a
document block that points at the object, mirroring a "file upload, then
generate" workflow. The uploaded object is the remote handle that cleanup
deletes once the request is over.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)
from fastapi.concurrency import run_in_threadpool

from chat_detective.application.interfaces import AnalysisClientInterface
from chat_detective.config.settings import settings
from chat_detective.domain.models import RemoteFile
from chat_detective.errors import RemoteCallError, RemoteTimeoutError
from chat_detective.services.aws import create_boto3_client, remote_call_config

logger = logging.getLogger(__name__)

_DOCUMENT_FORMATS = {
    "text/plain": "txt",
    "text/markdown": "md",
    "text/csv": "csv",
    "text/html": "html",
}
_DOCUMENT_NAME_PATTERN = re.compile(r"[^A-Za-z0-9\s\-\(\)\[\]]")
_REMOTE_FAILURES = (BotoCoreError, ClientError, S3UploadFailedError)


def _decode_bedrock_api_key(secret_value: Optional[str]) -> tuple[str, str] | None:
    """Decode the BEDROCK_API_KEY secret into access/secret key components."""

    if not secret_value:
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip(), validate=True)
    except (binascii.Error, ValueError):
        decoded_bytes = secret_value.encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    return access_key, secret_key


def _document_name(display_name: str) -> str:
    """Bedrock only accepts letters, digits, single spaces, hyphens, parens and brackets."""

    cleaned = _DOCUMENT_NAME_PATTERN.sub("", display_name)
    cleaned = " ".join(cleaned.split())
    return cleaned or "chat-transcript"


def _wrap_failure(action: str, exc: Exception) -> RemoteCallError:
    if isinstance(exc, (ReadTimeoutError, ConnectTimeoutError)):
        return RemoteTimeoutError(f"Timed out while trying to {action}: {exc}")
    return RemoteCallError(f"Failed to {action}: {exc}")


class BedrockAnalysisClient(AnalysisClientInterface):
    """Invoke Amazon Bedrock on transcripts staged in S3."""

    def __init__(
        self,
        *,
        bedrock_client: Any | None = None,
        s3_client: Any | None = None,
        bucket_name: str | None = None,
        key_prefix: str | None = None,
        model_id: str | None = None,
    ) -> None:
        self._model_id = model_id or settings.bedrock.model_id
        self._bucket = bucket_name or settings.s3.bucket_name
        self._key_prefix = (key_prefix if key_prefix is not None else settings.s3.key_prefix).strip("/")

        if bedrock_client is None:
            api_key_tuple = None
            if settings.bedrock.api_key:
                api_key_tuple = _decode_bedrock_api_key(
                    settings.bedrock.api_key.get_secret_value()
                )
            bedrock_client = create_boto3_client(
                "bedrock-runtime",
                region_name=settings.bedrock.region,
                aws_access_key_id=api_key_tuple[0] if api_key_tuple else None,
                aws_secret_access_key=api_key_tuple[1] if api_key_tuple else None,
                config=remote_call_config(),
            )
        if s3_client is None:
            s3_client = create_boto3_client(
                "s3",
                region_name=settings.s3.region,
                config=remote_call_config(),
            )

        self._bedrock = bedrock_client
        self._s3 = s3_client

    async def upload_file(self, path: str, mime_type: str, display_name: str) -> RemoteFile:
        """Upload a staged transcript and return the handle the model will read."""

        if not self._bucket:
            raise RemoteCallError("S3 bucket name is not configured.")

        filename = Path(path).name
        object_key = f"{uuid4().hex}-{filename}"
        if self._key_prefix:
            object_key = f"{self._key_prefix}/{object_key}"

        logger.info("Uploading transcript to s3://%s/%s", self._bucket, object_key)
        try:
            await run_in_threadpool(
                self._s3.upload_file,
                path,
                self._bucket,
                object_key,
                ExtraArgs={"ContentType": mime_type},
            )
        except _REMOTE_FAILURES as exc:
            raise _wrap_failure("upload transcript", exc) from exc

        uploaded = RemoteFile(
            uri=f"s3://{self._bucket}/{object_key}",
            mime_type=mime_type,
            name=object_key,
            display_name=display_name,
        )
        logger.info("Transcript uploaded: %s", uploaded.uri)
        return uploaded

    async def submit(self, *, instruction: str, document: RemoteFile, prompt: str) -> str:
        """Run a Bedrock ``converse`` call over the uploaded transcript."""

        document_block = {
            "document": {
                "format": _DOCUMENT_FORMATS.get(document.mime_type, "txt"),
                "name": _document_name(document.display_name),
                "source": {"s3Location": {"uri": document.uri}},
            }
        }
        inference_cfg = {
            "maxTokens": settings.bedrock.max_tokens,
            "temperature": settings.bedrock.temperature,
            "topP": settings.bedrock.top_p,
        }

        def _call() -> str:
            response = self._bedrock.converse(
                modelId=self._model_id,
                system=[{"text": instruction}],
                messages=[
                    {
                        "role": "user",
                        "content": [document_block, {"text": prompt}],
                    }
                ],
                inferenceConfig=inference_cfg,
            )
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        logger.info("Submitting %s to model %s", document.uri, self._model_id)
        try:
            result = await run_in_threadpool(_call)
        except _REMOTE_FAILURES as exc:
            raise _wrap_failure("generate analysis", exc) from exc

        if not result:
            raise RemoteCallError("Model returned an empty response.")
        return result

    async def delete_file(self, name: str) -> None:
        """Remove an uploaded transcript object."""

        logger.info("Deleting uploaded transcript s3://%s/%s", self._bucket, name)
        try:
            await run_in_threadpool(
                self._s3.delete_object,
                Bucket=self._bucket,
                Key=name,
            )
        except _REMOTE_FAILURES as exc:
            raise _wrap_failure("delete uploaded transcript", exc) from exc


__all__ = ["BedrockAnalysisClient"]
