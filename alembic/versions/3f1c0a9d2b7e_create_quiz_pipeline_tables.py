"""create videos, segments, questions, responses

Revision ID: 3f1c0a9d2b7e
Revises:
Create Date: 2026-10-19 09:12:31.402117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c0a9d2b7e"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "videos",
        sa.Column("video_id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=True),
        sa.Column("transcript", sa.Text(), nullable=True),
        sa.Column("word_count", sa.Integer(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("max_segments", sa.Integer(), nullable=True),
        sa.Column("creator_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_videos_creator_id", "videos", ["creator_id"])
    op.create_index("ix_videos_status", "videos", ["status"])

    op.create_table(
        "segments",
        sa.Column("segment_id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "video_id",
            sa.String(length=36),
            sa.ForeignKey("videos.video_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("idx", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("word_count", sa.Integer(), nullable=False),
        sa.Column("creator_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("video_id", "idx", name="uq_segments_video_idx"),
    )
    op.create_index("ix_segments_video_id", "segments", ["video_id"])
    op.create_index("ix_segments_creator_id", "segments", ["creator_id"])
    op.create_index("idx_segments_video_status", "segments", ["video_id", "status"])

    op.create_table(
        "questions",
        sa.Column("question_id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "segment_id",
            sa.String(length=36),
            sa.ForeignKey("segments.segment_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("option_a", sa.Text(), nullable=False),
        sa.Column("option_b", sa.Text(), nullable=False),
        sa.Column("option_c", sa.Text(), nullable=False),
        sa.Column("option_d", sa.Text(), nullable=False),
        sa.Column("correct_answer", sa.String(length=1), nullable=False),
        sa.Column("creator_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("segment_id", name="uq_questions_segment"),
        sa.CheckConstraint("correct_answer IN ('A','B','C','D')", name="ck_questions_correct_answer"),
    )
    op.create_index("ix_questions_segment_id", "questions", ["segment_id"])
    op.create_index("ix_questions_creator_id", "questions", ["creator_id"])

    op.create_table(
        "responses",
        sa.Column("response_id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "question_id",
            sa.String(length=36),
            sa.ForeignKey("questions.question_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("selected_answer", sa.String(length=1), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("creator_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="recorded"),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_responses_question_id", "responses", ["question_id"])
    op.create_index("ix_responses_user_id", "responses", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_responses_user_id", table_name="responses")
    op.drop_index("ix_responses_question_id", table_name="responses")
    op.drop_table("responses")

    op.drop_index("ix_questions_creator_id", table_name="questions")
    op.drop_index("ix_questions_segment_id", table_name="questions")
    op.drop_table("questions")

    op.drop_index("idx_segments_video_status", table_name="segments")
    op.drop_index("ix_segments_creator_id", table_name="segments")
    op.drop_index("ix_segments_video_id", table_name="segments")
    op.drop_table("segments")

    op.drop_index("ix_videos_status", table_name="videos")
    op.drop_index("ix_videos_creator_id", table_name="videos")
    op.drop_table("videos")
