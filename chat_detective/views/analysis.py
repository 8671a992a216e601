"""Schemas describing the analysis response.

The normalizer returns the model's JSON as-is apart from context bounding,
so these models document the expected shape in OpenAPI rather than
re-validating every field.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    time: int = Field(description="Message timestamp; 0 for the analyzer annotation.")
    author: str
    message: str


class AnalysisInstance(BaseModel):
    instance_id: int = Field(alias="instance_ID")
    context_before: List[ChatMessage] = Field(alias="context-before", max_length=10)
    flagged: List[ChatMessage] = Field(
        description="The flagged message followed by the AI-ANALYZER rationale.",
    )
    context_after: List[ChatMessage] = Field(alias="context-after", max_length=10)

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None
