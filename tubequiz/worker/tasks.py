import logging

from sqlalchemy.orm import Session

from tubequiz.core.config import settings
from tubequiz.db.session import SessionLocal
from tubequiz.models.video import VideoStatus
from tubequiz.services.pipeline import build_pipeline
from tubequiz.services.videos import get_video, set_failed
from tubequiz.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="pipeline.process_video")
def process_video(url: str, video_id: str, creator_id: str) -> dict:
    """
    Detached pipeline run for one video. Progress and failures are reported
    only through the video/segment rows; the return value is informational.
    """
    db: Session = SessionLocal()
    try:
        try:
            pipeline = build_pipeline(settings)
        except ValueError as e:
            # e.g. missing OPENAI_API_KEY; the video would otherwise sit in `pending`
            video = get_video(db, video_id, creator_id)
            if video is not None and video.status == VideoStatus.PENDING:
                set_failed(db, video_id, f"Pipeline configuration error: {e}")
            raise

        result = pipeline.run(db, url, video_id, creator_id)
        return {
            "ok": True,
            "video_id": video_id,
            "status": result.status,
            "skipped": result.skipped,
            "segments": result.segments,
            "questions_created": result.questions_created,
            "questions_failed": result.questions_failed[:50],  # cap payload size
        }
    except Exception:
        logger.exception("Pipeline failed for video %s", video_id)
        # keep raise for celery visibility; the video row already carries the error
        raise
    finally:
        db.close()
