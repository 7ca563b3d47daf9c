"""
Error taxonomy for the video -> quiz pipeline.

Stage errors are caught by the orchestrator, wrapped with the stage context
and written to the Video. Question generation errors stay on their Segment.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for every error the pipeline knows how to report."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(PipelineError):
    """Bad or unsupported source URL. Rejected before any stage runs."""


class DownloadError(PipelineError):
    """yt-dlp failed, timed out or produced no audio."""


class TranscriptionError(PipelineError):
    """Speech-to-text call failed."""


class PayloadTooLarge(TranscriptionError):
    pass


class TranscriptionTimeout(TranscriptionError):
    pass


class QuotaExceeded(TranscriptionError):
    """Provider refused the call for billing/rate reasons, not content reasons."""


class SegmentationError(PipelineError):
    pass


class StorageError(PipelineError):
    pass


class QuestionGenerationError(PipelineError):
    pass


class MalformedGenerationOutput(QuestionGenerationError):
    pass


class PipelineStageError(PipelineError):
    """A stage failure, already wrapped with its stage context."""

    def __init__(self, stage: str, message: str, cause: Exception | None = None):
        self.stage = stage
        self.cause = cause
        super().__init__(message)
