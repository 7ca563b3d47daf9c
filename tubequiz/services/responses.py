from __future__ import annotations

from sqlalchemy.orm import Session

from tubequiz.models.question import ANSWER_LABELS, Question
from tubequiz.models.response import Response


def record_response(db: Session, question_id: str, user_id: str, selected_answer: str) -> Response:
    """
    Store one answer and grade it against the question's correct_answer.
    """
    answer = (selected_answer or "").strip().upper()
    if answer not in ANSWER_LABELS:
        raise ValueError(f"selected_answer must be one of {', '.join(ANSWER_LABELS)}")

    q = db.query(Question).filter(Question.question_id == question_id).first()
    if not q:
        raise LookupError("Question not found")

    row = Response(
        question_id=q.question_id,
        user_id=user_id,
        selected_answer=answer,
        is_correct=answer == q.correct_answer,
        creator_id=q.creator_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
