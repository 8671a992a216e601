"""Pydantic schemas used as views in the MVC architecture."""

from .analysis import AnalysisInstance, ChatMessage, ErrorResponse

__all__ = [
    "AnalysisInstance",
    "ChatMessage",
    "ErrorResponse",
]
