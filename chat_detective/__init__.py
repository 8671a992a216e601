"""Chat Detective backend: AI-assisted analysis of exported chat logs."""

__version__ = "1.0.0"
