"""Release of temporary artifacts once a request is over (final stage).

Staged transcripts on local disk and transcripts uploaded for the model are
registered on an :class:`ArtifactScope` as soon as they exist. Whatever the
pipeline body does, the scope is released afterwards: remote handles first,
then local files. A failed removal is logged and recorded as a
:class:`CleanupWarning`; it never replaces the body's own result or error.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Awaitable, Callable, TypeVar

from fastapi.concurrency import run_in_threadpool

from chat_detective.application.interfaces import AnalysisClientInterface
from chat_detective.domain.models import RemoteFile
from chat_detective.errors import CleanupWarning

logger = logging.getLogger("chat_detective.pipeline")

T = TypeVar("T")


class ArtifactScope:
    """Temporary artifacts owned by a single analysis request."""

    def __init__(self, client: AnalysisClientInterface) -> None:
        self._client = client
        self.local_paths: list[Path] = []
        self.remote_files: list[RemoteFile] = []
        self.warnings: list[CleanupWarning] = []

    def add_local(self, path: Path) -> Path:
        self.local_paths.append(path)
        return path

    def add_remote(self, remote_file: RemoteFile) -> RemoteFile:
        self.remote_files.append(remote_file)
        return remote_file

    async def release(self) -> list[CleanupWarning]:
        """Attempt every removal; collect failures instead of raising them."""

        for remote_file in self.remote_files:
            try:
                await self._client.delete_file(remote_file.name)
            except Exception as exc:
                self._warn(f"remote file {remote_file.name}", exc)
            else:
                logger.info("Uploaded file deleted: %s", remote_file.name)

        for path in self.local_paths:
            try:
                await run_in_threadpool(path.unlink, missing_ok=True)
            except OSError as exc:
                self._warn(f"local file {path}", exc)
            else:
                logger.info("Temporary file deleted: %s", path)

        self.remote_files.clear()
        self.local_paths.clear()
        return list(self.warnings)

    def _warn(self, artifact: str, exc: BaseException) -> None:
        warning = CleanupWarning(artifact, str(exc) or exc.__class__.__name__)
        self.warnings.append(warning)
        logger.warning("%s", warning)


async def with_scoped_artifacts(
    client: AnalysisClientInterface,
    body: Callable[[ArtifactScope], Awaitable[T]],
) -> T:
    """Run ``body`` with a fresh scope and release the scope unconditionally."""

    scope = ArtifactScope(client)
    try:
        return await body(scope)
    finally:
        await scope.release()


__all__ = ["ArtifactScope", "with_scoped_artifacts"]
