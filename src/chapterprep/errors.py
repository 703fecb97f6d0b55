"""Exception types raised by chapterprep."""

from __future__ import annotations


class ChapterPrepError(Exception):
    """Base class for chapterprep failures."""


class ConfigurationError(ChapterPrepError):
    """Raised when a settings value has the wrong shape."""


class TransformError(ChapterPrepError):
    """Raised when a pipeline stage fails."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage
