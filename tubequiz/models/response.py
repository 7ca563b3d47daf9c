from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from tubequiz.db.base_class import Base


class Response(Base):
    """A user's answer to a Question. Written by the quiz API, never by the pipeline."""

    __tablename__ = "responses"

    response_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    question_id = Column(
        String(36),
        ForeignKey("questions.question_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(64), nullable=False, index=True)

    selected_answer = Column(String(1), nullable=False)  # A|B|C|D
    is_correct = Column(Boolean, nullable=False)

    creator_id = Column(String(64), nullable=False)

    status = Column(String(20), nullable=False, default="recorded")
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    question = relationship("Question", backref="responses")
