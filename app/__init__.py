"""Application entry points for the face region extractor."""

from .cli import main

__all__ = ["main"]
