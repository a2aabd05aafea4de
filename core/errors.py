"""
CaptionGenie — Error Taxonomy

Local errors (ValidationError, ImageProcessingError) are raised before any
Gemini call. GenerationError wraps every remote failure. StorageCorruptionError
never reaches the user: the history store recovers by resetting.
"""

from __future__ import annotations


class CaptionGenieError(Exception):
    """Base class for all CaptionGenie errors."""


class ValidationError(CaptionGenieError):
    """Required input is missing or out of range."""


class GenerationError(CaptionGenieError):
    """The Gemini call failed or returned a non-conforming response."""


class ImageProcessingError(CaptionGenieError):
    """Uploaded image is too large, of an unsupported type, or unreadable."""


class StorageCorruptionError(CaptionGenieError):
    """Persisted history could not be parsed."""


class RequestInProgressError(CaptionGenieError):
    """A studio request is already running."""
