import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from tubequiz.db.base_class import Base


class VideoStatus:
    PENDING = "pending"
    DOWNLOADING = "downloading"
    TRANSCRIBING = "transcribing"
    PROCESSING = "processing"
    SEGMENTED = "segmented"
    COMPLETED = "completed"
    ERROR = "error"


def _uuid() -> str:
    return str(uuid.uuid4())


class Video(Base):
    __tablename__ = "videos"

    video_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)

    # source
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)

    # pipeline outputs
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    word_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # requested segment count on create (null = derive from word count); actual count after segmentation
    max_segments: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # owner (access-control tag propagated to segments/questions)
    creator_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # status
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=VideoStatus.PENDING, index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())
