"""Tests for unconditional release of staged and uploaded transcripts."""

from __future__ import annotations

import asyncio

import pytest

from chat_detective.domain.models import RemoteFile
from chat_detective.errors import CleanupWarning, RemoteCallError
from chat_detective.pipelines.analysis.cleanup import ArtifactScope, with_scoped_artifacts


def _remote(name: str) -> RemoteFile:
    return RemoteFile(
        uri=f"s3://test-bucket/{name}",
        mime_type="text/plain",
        name=name,
        display_name="Discord Chat Data",
    )


def test_artifacts_are_released_after_success(tmp_path, scripted_client):
    staged = tmp_path / "1_chat.json"
    staged.write_text("{}", encoding="utf-8")

    async def body(scope: ArtifactScope) -> str:
        scope.add_local(staged)
        scope.add_remote(_remote("files/1"))
        return "done"

    assert asyncio.run(with_scoped_artifacts(scripted_client, body)) == "done"
    assert not staged.exists()
    assert scripted_client.deleted == ["files/1"]


def test_remote_handles_are_deleted_before_local_files(tmp_path, scripted_client):
    staged = tmp_path / "1_chat.json"
    staged.write_text("{}", encoding="utf-8")
    local_present_during_delete: list[bool] = []
    scripted_client.on_delete = lambda name: local_present_during_delete.append(staged.exists())

    async def body(scope: ArtifactScope) -> None:
        scope.add_local(staged)
        scope.add_remote(_remote("files/1"))

    asyncio.run(with_scoped_artifacts(scripted_client, body))

    assert local_present_during_delete == [True]
    assert not staged.exists()


def test_body_error_propagates_after_cleanup(tmp_path, scripted_client):
    staged = tmp_path / "1_chat.json"
    staged.write_text("{}", encoding="utf-8")

    async def body(scope: ArtifactScope) -> None:
        scope.add_local(staged)
        scope.add_remote(_remote("files/1"))
        raise ValueError("model exploded")

    with pytest.raises(ValueError, match="model exploded"):
        asyncio.run(with_scoped_artifacts(scripted_client, body))

    assert not staged.exists()
    assert scripted_client.deleted == ["files/1"]


def test_failed_remote_delete_does_not_mask_result_or_skip_local(tmp_path, scripted_client):
    staged = tmp_path / "1_chat.json"
    staged.write_text("{}", encoding="utf-8")
    scripted_client.delete_error = RemoteCallError("access denied")
    scopes: list[ArtifactScope] = []

    async def body(scope: ArtifactScope) -> list:
        scopes.append(scope)
        scope.add_local(staged)
        scope.add_remote(_remote("files/1"))
        scope.add_remote(_remote("files/2"))
        return []

    assert asyncio.run(with_scoped_artifacts(scripted_client, body)) == []
    assert not staged.exists()
    assert scripted_client.events == ["delete:files/1", "delete:files/2"]

    warnings = scopes[0].warnings
    assert len(warnings) == 2
    assert all(isinstance(warning, CleanupWarning) for warning in warnings)
    assert warnings[0].artifact == "remote file files/1"
    assert warnings[0].reason == "access denied"


def test_failed_remote_delete_does_not_replace_body_error(scripted_client):
    scripted_client.delete_error = RemoteCallError("access denied")

    async def body(scope: ArtifactScope) -> None:
        scope.add_remote(_remote("files/1"))
        raise KeyError("context-after")

    with pytest.raises(KeyError):
        asyncio.run(with_scoped_artifacts(scripted_client, body))


def test_missing_local_file_is_not_a_warning(tmp_path, scripted_client):
    scope = ArtifactScope(scripted_client)
    scope.add_local(tmp_path / "never-written.txt")

    assert asyncio.run(scope.release()) == []


def test_release_is_idempotent(tmp_path, scripted_client):
    scope = ArtifactScope(scripted_client)
    scope.add_remote(_remote("files/1"))

    asyncio.run(scope.release())
    asyncio.run(scope.release())

    assert scripted_client.deleted == ["files/1"]
