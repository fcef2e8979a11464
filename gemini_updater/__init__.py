"""Gemini CLI updater — keep Node.js, npm, the Gemini CLI and the Google Cloud SDK current."""

__version__ = "3.1.0"
