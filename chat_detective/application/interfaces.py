from abc import ABC, abstractmethod

from chat_detective.domain.models import RemoteFile


class AnalysisClientInterface(ABC):
    """Remote model capability: submit a transcript plus instructions, get text back."""

    @abstractmethod
    async def upload_file(self, path: str, mime_type: str, display_name: str) -> RemoteFile:
        ...

    @abstractmethod
    async def submit(self, *, instruction: str, document: RemoteFile, prompt: str) -> str:
        ...

    @abstractmethod
    async def delete_file(self, name: str) -> None:
        ...
