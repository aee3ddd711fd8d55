"""SQLAlchemy ORM models for the Clubhouse database.

Tables: teams, players, matches, match_scores, match_points, match_substitutions.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class TeamRow(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    players: Mapped[list[PlayerRow]] = relationship(back_populates="team")


class PlayerRow(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    handicap_index: Mapped[float] = mapped_column(Float, default=0.0)
    team_id: Mapped[str | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    player_type: Mapped[str] = mapped_column(String(20), default="PRIMARY")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    team: Mapped[TeamRow | None] = relationship(back_populates="players")

    __table_args__ = (Index("ix_players_team_id", "team_id"),)


class MatchRow(Base):
    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    home_team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    away_team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    starting_hole: Mapped[int] = mapped_column(Integer, default=1)
    # Stored as free text; normalized through models.league.normalize_status on read.
    status: Mapped[str] = mapped_column(String(20), default="SCHEDULED")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    scores: Mapped[list[MatchScoreRow]] = relationship(
        back_populates="match", cascade="all, delete-orphan"
    )
    points: Mapped[list[MatchPointsRow]] = relationship(
        back_populates="match", cascade="all, delete-orphan"
    )
    substitutions: Mapped[list[MatchSubstitutionRow]] = relationship(
        back_populates="match", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_matches_week", "week_number", "starting_hole"),
        Index("ix_matches_status", "status"),
    )


class MatchScoreRow(Base):
    __tablename__ = "match_scores"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    match_id: Mapped[str] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    hole: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    match: Mapped[MatchRow] = relationship(back_populates="scores")

    __table_args__ = (
        UniqueConstraint("match_id", "player_id", "hole", name="uq_match_player_hole"),
        Index("ix_match_scores_match_id", "match_id"),
    )


class MatchPointsRow(Base):
    """Per-hole point split, or the match aggregate when ``hole`` is NULL.

    Deliberately not unique on (match_id, hole): older data holds duplicate
    aggregates and readers must resolve them.
    """

    __tablename__ = "match_points"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    match_id: Mapped[str] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    team_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    hole: Mapped[int | None] = mapped_column(Integer, nullable=True)
    home_points: Mapped[float] = mapped_column(Float, default=0.0)
    away_points: Mapped[float] = mapped_column(Float, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    match: Mapped[MatchRow] = relationship(back_populates="points")

    __table_args__ = (Index("ix_match_points_match_hole", "match_id", "hole"),)


class MatchSubstitutionRow(Base):
    """A substitute standing in for one rostered player in one match."""

    __tablename__ = "match_substitutions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    match_id: Mapped[str] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    original_player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    substitute_player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    match: Mapped[MatchRow] = relationship(back_populates="substitutions")

    __table_args__ = (
        UniqueConstraint("match_id", "original_player_id", name="uq_match_original_player"),
        UniqueConstraint("match_id", "substitute_player_id", name="uq_match_substitute_player"),
    )
