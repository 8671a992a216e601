"""Service layer helpers for external integrations."""

from .llm_client import BedrockAnalysisClient
from .prompt_builder import build_instruction
from .response_contract import normalize

__all__ = [
    "BedrockAnalysisClient",
    "build_instruction",
    "normalize",
]
