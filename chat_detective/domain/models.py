from dataclasses import dataclass
from enum import Enum


class SourceFormat(str, Enum):
    """Chat export formats accepted by the analysis endpoints."""

    DISCORD = "discord"
    INSTAGRAM = "instagram"
    WHATSAPP = "whatsapp"

    @property
    def label(self) -> str:
        return {
            SourceFormat.DISCORD: "Discord",
            SourceFormat.INSTAGRAM: "Instagram",
            SourceFormat.WHATSAPP: "WhatsApp",
        }[self]

    @property
    def route_path(self) -> str:
        return f"/analyze{self.label.capitalize()}"

    @property
    def display_name(self) -> str:
        """Name given to the transcript once uploaded for the model."""
        return f"{self.label} Chat Data"

    @property
    def wraps_content(self) -> bool:
        """JSON exports are enveloped in <content> tags; WhatsApp text is not."""
        return self is not SourceFormat.WHATSAPP


@dataclass(frozen=True)
class AnalysisRequest:
    """One incoming analysis call, discarded once the pipeline finishes."""

    source_format: SourceFormat
    raw_transcript_bytes: bytes
    instruction: str
    reference_timestamp: int
    filename: str = "chat.txt"


@dataclass(frozen=True)
class RemoteFile:
    """Handle for a transcript uploaded where the model can read it."""

    uri: str
    mime_type: str
    name: str
    display_name: str
