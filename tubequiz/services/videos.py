import logging

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tubequiz.core.errors import StorageError
from tubequiz.models.video import Video, VideoStatus

logger = logging.getLogger(__name__)

TITLE_MAX_LEN = 512  # videos.title column width


def create_video(db: Session, url: str, creator_id: str, max_segments: int | None = None) -> Video:
    video = Video(
        url=url,
        creator_id=creator_id,
        status=VideoStatus.PENDING,
        title=url[:TITLE_MAX_LEN],  # placeholder until the downloader reports the real title
        max_segments=max_segments,
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


def get_video(db: Session, video_id: str, creator_id: str | None = None) -> Video | None:
    q = db.query(Video).filter(Video.video_id == video_id)
    if creator_id is not None:
        q = q.filter(Video.creator_id == creator_id)
    return q.first()


def claim_video(db: Session, video_id: str, creator_id: str) -> bool:
    """
    Atomically move a pending video to `downloading`.

    Returns False when the video is missing or already past `pending`
    (a redelivered or duplicate job), so only one run ever owns a video.
    """
    try:
        result = db.execute(
            update(Video)
            .where(
                Video.video_id == video_id,
                Video.creator_id == creator_id,
                Video.status == VideoStatus.PENDING,
            )
            .values(status=VideoStatus.DOWNLOADING, error_message=None, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Database error claiming video {video_id}: {e}")

    claimed = result.rowcount == 1
    if claimed:
        logger.info("Video %s status -> %s", video_id, VideoStatus.DOWNLOADING)
    return claimed


def set_video_status(db: Session, video_id: str, status: str, error: str | None = None) -> Video:
    try:
        video = db.query(Video).filter(Video.video_id == video_id).one()
        video.status = status
        video.error_message = error
        db.commit()
        db.refresh(video)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Database error updating video {video_id}: {e}")
    logger.info("Video %s status -> %s%s", video_id, status, f" ({error})" if error else "")
    return video


def set_transcribed(
    db: Session,
    video_id: str,
    *,
    title: str | None,
    transcript: str,
    word_count: int,
) -> Video:
    """Store transcript metadata and move to `processing` in one write."""
    try:
        video = db.query(Video).filter(Video.video_id == video_id).one()
        video.title = (title or video.title or "")[:TITLE_MAX_LEN] or None
        video.transcript = transcript
        video.word_count = word_count
        video.status = VideoStatus.PROCESSING
        video.error_message = None
        db.commit()
        db.refresh(video)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e))
    logger.info("Video %s status -> %s (%d words)", video_id, VideoStatus.PROCESSING, word_count)
    return video


def set_segmented(db: Session, video_id: str, segment_count: int) -> Video:
    try:
        video = db.query(Video).filter(Video.video_id == video_id).one()
        video.max_segments = segment_count
        video.status = VideoStatus.SEGMENTED
        db.commit()
        db.refresh(video)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e))
    logger.info("Video %s status -> %s (%d segments)", video_id, VideoStatus.SEGMENTED, segment_count)
    return video


def set_failed(db: Session, video_id: str, error: str) -> Video:
    return set_video_status(db, video_id, VideoStatus.ERROR, error=error)
