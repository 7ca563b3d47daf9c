from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tubequiz.core.errors import SegmentationError, StorageError
from tubequiz.models.segment import Segment, SegmentStatus
from tubequiz.models.video import Video

logger = logging.getLogger(__name__)

WORDS_PER_SEGMENT = 900


@dataclass
class SegmentDraft:
    idx: int
    content: str
    word_count: int


def _validate_target(target_segments) -> int:
    # bool is an int subclass; reject it along with floats/strings
    if isinstance(target_segments, bool) or not isinstance(target_segments, int):
        raise SegmentationError(f"Invalid segment count override: {target_segments!r}")
    if target_segments <= 0:
        raise SegmentationError(f"Segment count override must be >= 1 (got {target_segments})")
    return target_segments


def split_transcript(
    text: str,
    target_segments: int | None = None,
    *,
    words_per_segment: int = WORDS_PER_SEGMENT,
) -> list[SegmentDraft]:
    """
    Partition a transcript into near-equal word-count segments, in source order.

    Rule:
      - target = override, else ceil(total_words / words_per_segment)
      - per_segment = ceil(total_words / target)
      - segment i = words[i*per_segment : min((i+1)*per_segment, total)]

    Trailing slices that would be empty (override larger than the words allow)
    are dropped, so the result may hold fewer than `target` segments.
    """
    if target_segments is not None:
        target_segments = _validate_target(target_segments)
    if words_per_segment <= 0:
        raise SegmentationError(f"words_per_segment must be >= 1 (got {words_per_segment})")

    words = (text or "").strip().split()
    total_words = len(words)
    if total_words == 0:
        raise SegmentationError("Transcript is empty")

    target = target_segments or math.ceil(total_words / words_per_segment)
    per_segment = math.ceil(total_words / target)

    logger.info(
        "Creating segments: total_words=%d target_segments=%d words_per_segment=%d",
        total_words,
        target,
        per_segment,
    )

    drafts: list[SegmentDraft] = []
    for i in range(target):
        start = i * per_segment
        end = min(start + per_segment, total_words)
        if start >= end:
            break
        content = " ".join(words[start:end])
        # re-split the joined text; this count is the one stored
        drafts.append(SegmentDraft(idx=len(drafts), content=content, word_count=len(content.split())))

    if len(drafts) < target:
        logger.info("Dropped %d empty trailing segment(s)", target - len(drafts))
    return drafts


def create_segments(
    db: Session,
    video_id: str,
    transcript_text: str,
    *,
    words_per_segment: int = WORDS_PER_SEGMENT,
) -> list[SegmentDraft]:
    """
    Segment a video's transcript, honouring the video's max_segments override.
    """
    video = db.query(Video).filter(Video.video_id == video_id).first()
    if not video:
        raise SegmentationError(f"Video not found: {video_id}")

    return split_transcript(transcript_text, video.max_segments, words_per_segment=words_per_segment)


def store_segments(db: Session, video_id: str, creator_id: str, drafts: list[SegmentDraft]) -> list[Segment]:
    """
    Batch insert (one transaction) and return rows in transcript order with their ids.
    """
    if not drafts:
        raise SegmentationError("No segments to store")
    if not creator_id:
        raise SegmentationError("Creator ID is required")

    try:
        video = (
            db.query(Video)
            .filter(Video.video_id == video_id, Video.creator_id == creator_id)
            .first()
        )
        if not video:
            raise StorageError(f"Video not found or access denied: {video_id}")

        rows = [
            Segment(
                video_id=video_id,
                idx=d.idx,
                content=d.content,
                word_count=d.word_count,
                creator_id=creator_id,
                status=SegmentStatus.PENDING,
            )
            for d in drafts
        ]
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Database error storing segments: {e}")

    logger.info("Stored %d segments for video %s", len(rows), video_id)
    return rows


def list_segments(db: Session, video_id: str, creator_id: str | None = None) -> list[Segment]:
    q = db.query(Segment).filter(Segment.video_id == video_id)
    if creator_id is not None:
        q = q.filter(Segment.creator_id == creator_id)
    return q.order_by(Segment.idx.asc()).all()


def set_segment_status(
    db: Session,
    segment_id: str,
    creator_id: str,
    status: str,
    error_message: str | None = None,
) -> None:
    try:
        seg = (
            db.query(Segment)
            .filter(Segment.segment_id == segment_id, Segment.creator_id == creator_id)
            .first()
        )
        if not seg:
            raise StorageError(f"Segment not found: {segment_id}")
        seg.status = status
        seg.error_message = error_message
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Database error updating segment {segment_id}: {e}")
