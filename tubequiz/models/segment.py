from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from tubequiz.db.base_class import Base


class SegmentStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


class Segment(Base):
    __tablename__ = "segments"

    segment_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    video_id = Column(
        String(36),
        ForeignKey("videos.video_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # position inside the transcript (0-based); segments are read back ordered by idx
    idx = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    word_count = Column(Integer, nullable=False)

    creator_id = Column(String(64), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=SegmentStatus.PENDING)  # pending|completed|error
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    video = relationship("Video", backref="segments")

    __table_args__ = (
        UniqueConstraint("video_id", "idx", name="uq_segments_video_idx"),
        Index("idx_segments_video_status", "video_id", "status"),
    )
