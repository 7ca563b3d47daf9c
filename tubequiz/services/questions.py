from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tubequiz.core.errors import (
    MalformedGenerationOutput,
    PipelineError,
    QuestionGenerationError,
    StorageError,
)
from tubequiz.models.question import Question
from tubequiz.models.segment import SegmentStatus
from tubequiz.services.llm.openai_client import ChatClient
from tubequiz.services.llm.prompts import QUESTION_SYSTEM, QUESTION_USER_TEMPLATE
from tubequiz.services.segmentation import set_segment_status

logger = logging.getLogger(__name__)


# Tagged-line grammar: (label, value pattern), in the order the lines must appear.
_QUESTION_GRAMMAR = [
    ("Q", r".+"),
    ("A", r".+"),
    ("B", r".+"),
    ("C", r".+"),
    ("D", r".+"),
    ("CORRECT", r"[ABCD]"),
]
_LINE_RES = [(label, re.compile(rf"^{label}: ({value})$")) for label, value in _QUESTION_GRAMMAR]


@dataclass
class ParsedQuestion:
    question_text: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_answer: str


def parse_question_output(raw: str) -> ParsedQuestion:
    """
    Parse the six-line model answer:

        Q: <question>
        A: <option>
        B: <option>
        C: <option>
        D: <option>
        CORRECT: <A|B|C|D>

    Surrounding whitespace of the whole answer is ignored; anything else that
    deviates raises MalformedGenerationOutput naming the first bad line.
    """
    text = (raw or "").strip()
    if not text:
        raise MalformedGenerationOutput("Empty response from language model")

    lines = text.splitlines()
    if len(lines) != len(_LINE_RES):
        raise MalformedGenerationOutput(
            f"Invalid question format: expected {len(_LINE_RES)} lines, got {len(lines)}"
        )

    values: list[str] = []
    for n, (line, (label, line_re)) in enumerate(zip(lines, _LINE_RES), start=1):
        m = line_re.match(line.rstrip())
        value = m.group(1).strip() if m else ""
        if not value:
            raise MalformedGenerationOutput(
                f"Invalid question format on line {n}: expected '{label}: ...', got {line[:80]!r}"
            )
        values.append(value)

    q, a, b, c, d, correct = values
    return ParsedQuestion(
        question_text=q,
        option_a=a,
        option_b=b,
        option_c=c,
        option_d=d,
        correct_answer=correct,
    )


def question_exists(db: Session, segment_id: str) -> bool:
    return db.query(Question.question_id).filter(Question.segment_id == segment_id).first() is not None


class QuestionGenerator:
    """
    One multiple-choice question per segment, idempotent per segment_id.
    """

    def __init__(self, chat: ChatClient) -> None:
        self.chat = chat

    def _insert(self, db: Session, segment_id: str, creator_id: str, parsed: ParsedQuestion) -> Question | None:
        row = Question(
            segment_id=segment_id,
            question_text=parsed.question_text,
            option_a=parsed.option_a,
            option_b=parsed.option_b,
            option_c=parsed.option_c,
            option_d=parsed.option_d,
            correct_answer=parsed.correct_answer,
            creator_id=creator_id,
            status="active",
        )
        try:
            db.add(row)
            db.commit()
        except IntegrityError:
            db.rollback()
            if question_exists(db, segment_id):
                # lost a race with another run for the same segment
                logger.info("Question already exists for segment %s", segment_id)
                return None
            raise
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError(f"Database error storing question: {e}")
        return row

    def generate(self, db: Session, segment_id: str, content: str, creator_id: str) -> Question | None:
        """
        Returns the stored Question, or None when one already existed.

        Any failure marks the segment `error` with the message, then re-raises.
        """
        logger.info("Generating question for segment %s (content_chars=%d)", segment_id, len(content or ""))
        try:
            if question_exists(db, segment_id):
                logger.info("Question already exists for segment %s", segment_id)
                return None

            try:
                raw = self.chat.complete(QUESTION_SYSTEM, QUESTION_USER_TEMPLATE.format(content=content))
            except PipelineError:
                raise
            except Exception as e:
                raise QuestionGenerationError(f"Language model call failed: {e}")

            try:
                parsed = parse_question_output(raw)
            except MalformedGenerationOutput:
                logger.warning("Invalid question format from model for segment %s: %r", segment_id, (raw or "")[:500])
                raise

            row = self._insert(db, segment_id, creator_id, parsed)
            if row is None:
                return None

            set_segment_status(db, segment_id, creator_id, SegmentStatus.COMPLETED)
            logger.info("Stored question %s for segment %s (correct=%s)", row.question_id, segment_id, row.correct_answer)
            return row

        except Exception as e:
            db.rollback()
            message = e.message if isinstance(e, PipelineError) else str(e) or "Unknown error generating question"
            try:
                set_segment_status(db, segment_id, creator_id, SegmentStatus.ERROR, error_message=message)
            except StorageError as update_err:
                logger.error("Error updating segment %s error status: %s", segment_id, update_err)
            raise
