import logging

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from tubequiz.core.errors import InvalidInput, StorageError
from tubequiz.db.session import get_db
from tubequiz.models.question import Question
from tubequiz.services.responses import record_response
from tubequiz.services.segmentation import list_segments
from tubequiz.services.videos import create_video, get_video, set_failed
from tubequiz.services.youtube import validate_video_url
from tubequiz.worker.tasks import process_video

logger = logging.getLogger(__name__)

router = APIRouter(tags=["videos"])


def get_creator_id(x_creator_id: str | None = Header(default=None)) -> str:
    """Identity is established upstream (auth gateway) and forwarded as X-Creator-Id."""
    creator_id = (x_creator_id or "").strip()
    if not creator_id:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return creator_id


class VideoCreateRequest(BaseModel):
    url: str
    max_segments: int | None = Field(default=None, ge=1)


class VideoOut(BaseModel):
    video_id: str
    url: str
    title: str | None
    status: str
    error_message: str | None
    word_count: int | None
    max_segments: int | None
    creator_id: str


class VideoCreateResponse(BaseModel):
    ok: bool
    video: VideoOut
    task_id: str


def _video_out(v) -> VideoOut:
    return VideoOut(
        video_id=v.video_id,
        url=v.url,
        title=v.title,
        status=v.status,
        error_message=v.error_message,
        word_count=v.word_count,
        max_segments=v.max_segments,
        creator_id=v.creator_id,
    )


@router.post("/videos", response_model=VideoCreateResponse)
def create_from_youtube(
    req: VideoCreateRequest,
    db: Session = Depends(get_db),
    creator_id: str = Depends(get_creator_id),
) -> VideoCreateResponse:
    url = (req.url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="Missing URL")
    try:
        validate_video_url(url)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)

    video = create_video(db, url, creator_id, max_segments=req.max_segments)

    # fire-and-forget: the response returns before the pipeline runs
    try:
        async_result = process_video.delay(url, video.video_id, creator_id)
    except Exception as e:
        logger.exception("Failed to enqueue pipeline for video %s", video.video_id)
        message = f"Failed to enqueue processing: {e}"
        try:
            set_failed(db, video.video_id, message)
        except StorageError as update_err:
            logger.error("Error updating video %s error status: %s", video.video_id, update_err)
        raise HTTPException(status_code=503, detail=message)

    # re-read: in eager (test) mode the pipeline has already moved the row
    db.refresh(video)
    return VideoCreateResponse(ok=True, video=_video_out(video), task_id=async_result.id)


class VideoStatusResponse(BaseModel):
    status: str
    error_message: str | None
    title: str | None
    word_count: int | None
    max_segments: int | None


@router.get("/videos/{video_id}/status", response_model=VideoStatusResponse)
def get_video_status(
    video_id: str,
    db: Session = Depends(get_db),
    creator_id: str = Depends(get_creator_id),
) -> VideoStatusResponse:
    video = get_video(db, video_id, creator_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return VideoStatusResponse(
        status=video.status,
        error_message=video.error_message,
        title=video.title,
        word_count=video.word_count,
        max_segments=video.max_segments,
    )


@router.get("/videos/{video_id}/quiz")
def get_video_quiz(
    video_id: str,
    db: Session = Depends(get_db),
    creator_id: str = Depends(get_creator_id),
):
    video = get_video(db, video_id, creator_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")

    segments = list_segments(db, video_id, creator_id)
    seg_ids = [s.segment_id for s in segments]
    questions = db.query(Question).filter(Question.segment_id.in_(seg_ids)).all() if seg_ids else []
    by_segment = {q.segment_id: q for q in questions}

    items = []
    for s in segments:
        q = by_segment.get(s.segment_id)
        items.append(
            {
                "segment_id": s.segment_id,
                "idx": s.idx,
                "word_count": s.word_count,
                "status": s.status,
                "error_message": s.error_message,
                "question": (
                    {
                        "question_id": q.question_id,
                        "question_text": q.question_text,
                        "options": q.options(),
                        "correct_answer": q.correct_answer,
                    }
                    if q
                    else None
                ),
            }
        )

    return {
        "ok": True,
        "video_id": video.video_id,
        "title": video.title,
        "status": video.status,
        "segments": items,
    }


class ResponseCreateRequest(BaseModel):
    selected_answer: str


@router.post("/questions/{question_id}/responses")
def answer_question(
    question_id: str,
    req: ResponseCreateRequest,
    db: Session = Depends(get_db),
    creator_id: str = Depends(get_creator_id),
):
    try:
        r = record_response(db, question_id, creator_id, req.selected_answer)
    except LookupError:
        raise HTTPException(status_code=404, detail="Question not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "ok": True,
        "response_id": r.response_id,
        "question_id": r.question_id,
        "selected_answer": r.selected_answer,
        "is_correct": r.is_correct,
    }
