"""Exception types raised by the face region extractor."""

from __future__ import annotations

from typing import Optional


class FaceRoiError(Exception):
    """Base class for every error raised by this package."""


class ImageLoadError(FaceRoiError):
    """The photo could not be read or decoded."""

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        self.path = path
        message = f"Could not load image: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ModelLoadError(FaceRoiError):
    """A detector model artifact is missing or cannot be parsed."""

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        self.path = path
        message = f"Could not load model: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigError(FaceRoiError):
    """Configuration values are invalid."""
