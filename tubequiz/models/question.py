from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from tubequiz.db.base_class import Base

ANSWER_LABELS = ("A", "B", "C", "D")


class Question(Base):
    __tablename__ = "questions"

    question_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # at most one question per segment
    segment_id = Column(
        String(36),
        ForeignKey("segments.segment_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    question_text = Column(Text, nullable=False)
    option_a = Column(Text, nullable=False)
    option_b = Column(Text, nullable=False)
    option_c = Column(Text, nullable=False)
    option_d = Column(Text, nullable=False)
    correct_answer = Column(String(1), nullable=False)  # A|B|C|D

    creator_id = Column(String(64), nullable=False, index=True)

    status = Column(String(20), nullable=False, default="active")
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    segment = relationship("Segment", backref="questions")

    __table_args__ = (UniqueConstraint("segment_id", name="uq_questions_segment"),)

    def options(self) -> dict[str, str]:
        return {"A": self.option_a, "B": self.option_b, "C": self.option_c, "D": self.option_d}
