from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Index, Integer, MetaData, Table, Text, false, func
from sqlalchemy.dialects.postgresql import JSONB

metadata = MetaData()

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests).
JsonColumn = JSON().with_variant(JSONB(), "postgresql")

research_score_history = Table(
    "research_score_history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("game_date", Date, nullable=False),
    Column("game_id", Text, nullable=False, unique=True),
    Column("home_team_id", Text, nullable=False),
    Column("home_team_name", Text, nullable=False),
    Column("away_team_id", Text, nullable=False),
    Column("away_team_name", Text, nullable=False),
    Column("home_research_score", Integer, nullable=False),
    Column("away_research_score", Integer, nullable=False),
    Column("score_differential", Integer, nullable=False),
    Column("prediction", Text, nullable=False),
    Column("prediction_confidence", Text, nullable=False),
    Column("home_final_score", Integer, nullable=True),
    Column("away_final_score", Integer, nullable=True),
    Column("game_completed", Boolean, nullable=False, server_default=false()),
    Column("prediction_correct", Boolean, nullable=True),
    Column("home_analysis_breakdown", JsonColumn, nullable=True),
    Column("away_analysis_breakdown", JsonColumn, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

Index("idx_research_score_history_game_date", research_score_history.c.game_date)
Index(
    "idx_research_score_history_completed",
    research_score_history.c.game_completed,
    research_score_history.c.prediction_confidence,
)
