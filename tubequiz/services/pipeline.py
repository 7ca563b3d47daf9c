"""
Video -> quiz pipeline.

    pending -> downloading -> transcribing -> processing -> segmented -> completed
        any state before completed -> error

Each status is written before its stage starts, so a poller always sees the
stage in progress. A failed stage records a stage-prefixed message on the
video and halts the run. Question generation is best-effort per segment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Protocol

from sqlalchemy.orm import Session

from tubequiz.core.config import Settings
from tubequiz.core.errors import InvalidInput, PipelineError, PipelineStageError, StorageError
from tubequiz.models.video import Video, VideoStatus
from tubequiz.services.llm.openai_client import OpenAIChatClient
from tubequiz.services.questions import QuestionGenerator
from tubequiz.services.segmentation import WORDS_PER_SEGMENT, create_segments, store_segments
from tubequiz.services.stt import OpenAITranscriber, STTResult
from tubequiz.services.videos import (
    claim_video,
    get_video,
    set_failed,
    set_segmented,
    set_transcribed,
    set_video_status,
)
from tubequiz.services.workspace import scoped_workdir
from tubequiz.services.youtube import validate_video_url
from tubequiz.services.youtube_audio import AudioDownload, YtDlpDownloader

logger = logging.getLogger(__name__)


class Downloader(Protocol):
    def fetch_audio(self, url: str, out_dir: Path) -> AudioDownload: ...


class Transcriber(Protocol):
    def transcribe(self, audio_path: Path) -> STTResult: ...


@dataclass
class PipelineResult:
    video_id: str
    status: str
    skipped: bool = False
    segments: int = 0
    questions_created: int = 0
    questions_failed: list[dict] = field(default_factory=list)


def _describe(e: Exception) -> str:
    if isinstance(e, PipelineError):
        return e.message
    return str(e) or e.__class__.__name__


class VideoPipeline:
    def __init__(
        self,
        downloader: Downloader,
        transcriber: Transcriber,
        question_generator: QuestionGenerator,
        *,
        work_dir: Path,
        words_per_segment: int = WORDS_PER_SEGMENT,
    ) -> None:
        self.downloader = downloader
        self.transcriber = transcriber
        self.question_generator = question_generator
        self.work_dir = Path(work_dir)
        self.words_per_segment = words_per_segment

    def _stage(self, stage: str, prefix: str, fn: Callable, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            logger.exception("Stage %s failed", stage)
            raise PipelineStageError(stage, f"{prefix}: {_describe(e)}", cause=e) from e

    def _fail(self, db: Session, video_id: str, message: str) -> None:
        try:
            db.rollback()
            set_failed(db, video_id, message)
        except StorageError as e:
            logger.error("Error updating video %s error status: %s", video_id, e)

    def run(self, db: Session, url: str, video_id: str, creator_id: str) -> PipelineResult:
        video = get_video(db, video_id, creator_id)
        if video is None:
            logger.warning("Video %s not found for creator %s; nothing to do", video_id, creator_id)
            return PipelineResult(video_id=video_id, status="missing", skipped=True)
        if video.status != VideoStatus.PENDING:
            logger.warning("Video %s is %s, not pending; skipping run", video_id, video.status)
            return PipelineResult(video_id=video_id, status=video.status, skipped=True)

        try:
            validate_video_url(url)
        except InvalidInput as e:
            message = f"Invalid video URL: {e.message}"
            self._fail(db, video_id, message)
            raise PipelineStageError("validate", message, cause=e) from e

        if not claim_video(db, video_id, creator_id):
            current = db.query(Video).filter(Video.video_id == video_id).populate_existing().first()
            status = current.status if current else "missing"
            logger.warning("Video %s was claimed by another run (status=%s); skipping", video_id, status)
            return PipelineResult(video_id=video_id, status=status, skipped=True)

        try:
            with scoped_workdir(self.work_dir, video_id) as workdir:
                return self._run_stages(db, url, video_id, creator_id, workdir)
        except PipelineStageError as e:
            self._fail(db, video_id, e.message)
            raise
        except Exception as e:
            message = _describe(e) or "Unknown pipeline error"
            logger.exception("Unexpected pipeline error for video %s", video_id)
            self._fail(db, video_id, message)
            raise PipelineStageError("unknown", message, cause=e) from e

    def _run_stages(self, db: Session, url: str, video_id: str, creator_id: str, workdir: Path) -> PipelineResult:
        # 1) download (status already `downloading` from the claim)
        audio = self._stage("download", "Failed to download video", self.downloader.fetch_audio, url, workdir)

        # 2) transcribe
        self._stage(
            "transcribe",
            "Failed to update video record",
            set_video_status,
            db,
            video_id,
            VideoStatus.TRANSCRIBING,
        )
        stt = self._stage("transcribe", "Failed to transcribe audio", self.transcriber.transcribe, audio.path)

        # 3) persist transcript + metadata
        self._stage(
            "processing",
            "Failed to update video record",
            set_transcribed,
            db,
            video_id,
            title=audio.title,
            transcript=stt.text,
            word_count=stt.word_count,
        )

        # 4) segment + store
        drafts = self._stage(
            "segment",
            "Failed to create segments",
            create_segments,
            db,
            video_id,
            stt.text,
            words_per_segment=self.words_per_segment,
        )
        segments = self._stage("store_segments", "Failed to store segments", store_segments, db, video_id, creator_id, drafts)
        self._stage("store_segments", "Failed to store segments", set_segmented, db, video_id, len(segments))

        # 5) questions, one segment at a time; failures stay on the segment
        result = PipelineResult(video_id=video_id, status=VideoStatus.SEGMENTED, segments=len(segments))
        for seg in segments:
            try:
                if self.question_generator.generate(db, seg.segment_id, seg.content, creator_id) is not None:
                    result.questions_created += 1
            except Exception as e:
                logger.warning("Question generation failed for segment %s: %s", seg.segment_id, _describe(e))
                result.questions_failed.append({"segment_id": seg.segment_id, "error": _describe(e)})

        # 6) done
        self._stage("complete", "Failed to update video record", set_video_status, db, video_id, VideoStatus.COMPLETED)
        result.status = VideoStatus.COMPLETED
        logger.info(
            "Video %s completed: %d segments, %d questions, %d failed",
            video_id,
            result.segments,
            result.questions_created,
            len(result.questions_failed),
        )
        return result


def build_pipeline(s: Settings) -> VideoPipeline:
    """Wire real provider clients from explicit settings."""
    return VideoPipeline(
        YtDlpDownloader.from_settings(s),
        OpenAITranscriber.from_settings(s),
        QuestionGenerator(OpenAIChatClient.from_settings(s)),
        work_dir=s.work_dir,
        words_per_segment=s.words_per_segment,
    )
