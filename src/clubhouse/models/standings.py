"""Standings output models.

Serialized with camelCase keys (``teamId``, ``leaguePoints``) for the
web client; Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

WarningKind = Literal[
    "missing_aggregate",
    "duplicate_aggregate",
    "unexpected_point_total",
    "unknown_team",
    "partial_round",
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WeeklyPoints(_CamelModel):
    """One team's share of one decided match, for drill-down."""

    week_number: int
    points: float
    match_id: str
    opponent_name: str
    result: Literal["W", "L", "T"]


class TeamStanding(_CamelModel):
    team_id: str
    team_name: str
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    matches_tied: int = 0
    league_points: float = 0.0
    weekly_points: list[WeeklyPoints] = Field(default_factory=list)
    win_percentage: float = 0.0


class PlayerStanding(_CamelModel):
    player_id: str
    player_name: str
    team_id: str | None = None
    handicap_index: float = 0.0
    total_gross_score: int = 0
    total_net_score: int = 0
    matches_played: int = 0
    rounds_played: int = 0
    partial_rounds: int = 0
    average_gross_score: float = 0.0
    average_net_score: float = 0.0


class DataQualityWarning(_CamelModel):
    """A stored-data anomaly that was excluded or flagged instead of guessed at."""

    kind: WarningKind
    message: str
    match_id: str | None = None
    player_id: str | None = None


class TeamStandingsReport(_CamelModel):
    data: list[TeamStanding]
    warnings: list[DataQualityWarning] = Field(default_factory=list)


class PlayerStandingsReport(_CamelModel):
    data: list[PlayerStanding]
    warnings: list[DataQualityWarning] = Field(default_factory=list)
