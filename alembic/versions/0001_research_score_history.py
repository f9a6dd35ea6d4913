from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_research_score_history"
down_revision = None
branch_labels = None
depends_on = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        "research_score_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("game_date", sa.Date(), nullable=False),
        sa.Column("game_id", sa.Text(), nullable=False),
        sa.Column("home_team_id", sa.Text(), nullable=False),
        sa.Column("home_team_name", sa.Text(), nullable=False),
        sa.Column("away_team_id", sa.Text(), nullable=False),
        sa.Column("away_team_name", sa.Text(), nullable=False),
        sa.Column("home_research_score", sa.Integer(), nullable=False),
        sa.Column("away_research_score", sa.Integer(), nullable=False),
        sa.Column("score_differential", sa.Integer(), nullable=False),
        sa.Column("prediction", sa.Text(), nullable=False),
        sa.Column("prediction_confidence", sa.Text(), nullable=False),
        sa.Column("home_final_score", sa.Integer(), nullable=True),
        sa.Column("away_final_score", sa.Integer(), nullable=True),
        sa.Column("game_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("prediction_correct", sa.Boolean(), nullable=True),
        sa.Column("home_analysis_breakdown", JSON_TYPE, nullable=True),
        sa.Column("away_analysis_breakdown", JSON_TYPE, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("game_id", name="uq_research_score_history_game_id"),
        sa.CheckConstraint(
            "prediction in ('home', 'away', 'neutral')",
            name="ck_research_score_history_prediction",
        ),
        sa.CheckConstraint(
            "prediction_confidence in ('high', 'medium', 'low')",
            name="ck_research_score_history_confidence",
        ),
    )
    op.create_index(
        "idx_research_score_history_game_date", "research_score_history", ["game_date"]
    )
    op.create_index(
        "idx_research_score_history_completed",
        "research_score_history",
        ["game_completed", "prediction_confidence"],
    )


def downgrade() -> None:
    op.drop_index("idx_research_score_history_completed", table_name="research_score_history")
    op.drop_index("idx_research_score_history_game_date", table_name="research_score_history")
    op.drop_table("research_score_history")
