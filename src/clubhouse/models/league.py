"""Team, Player, Match, and scoring record models.

These are the validated shapes the core works with. Database rows are
converted into them by the repository, which is also where raw status
strings get normalized.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class MatchStatus(StrEnum):
    """Lifecycle of a scheduled match."""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FINALIZED = "FINALIZED"
    CANCELLED = "CANCELLED"

    @property
    def is_decided(self) -> bool:
        return self in DECIDED_STATUSES


# COMPLETED and FINALIZED are the same terminal state under two names.
DECIDED_STATUSES: frozenset[MatchStatus] = frozenset(
    {MatchStatus.COMPLETED, MatchStatus.FINALIZED}
)

_STATUS_ALIASES: dict[str, MatchStatus] = {
    "in-progress": MatchStatus.IN_PROGRESS,
    "inprogress": MatchStatus.IN_PROGRESS,
    "complete": MatchStatus.COMPLETED,
    "final": MatchStatus.FINALIZED,
    "canceled": MatchStatus.CANCELLED,
}


def normalize_status(raw: str | None) -> MatchStatus:
    """Convert a stored status string of any casing to a MatchStatus.

    Raises ValueError for values that cannot be mapped; a match with an
    unreadable status is a malformed row, not a scheduled match.
    """
    if raw is None:
        raise ValueError("match status is missing")
    cleaned = raw.strip()
    try:
        return MatchStatus(cleaned.upper())
    except ValueError:
        pass
    alias = _STATUS_ALIASES.get(cleaned.lower())
    if alias is None:
        raise ValueError(f"unknown match status {raw!r}")
    logger.debug("status_alias raw=%s normalized=%s", raw, alias)
    return alias


class PlayerType(StrEnum):
    PRIMARY = "PRIMARY"
    SUBSTITUTE = "SUBSTITUTE"


class Team(BaseModel):
    """A two-player league team."""

    id: str
    name: str


class Player(BaseModel):
    id: str
    name: str
    handicap_index: float = Field(ge=-10, le=54, default=0.0)
    team_id: str | None = None
    player_type: PlayerType = PlayerType.PRIMARY


class Match(BaseModel):
    """One scheduled pairing of a home and an away team in a given week."""

    id: str
    date: datetime
    week_number: int = Field(ge=1)
    home_team_id: str
    away_team_id: str
    starting_hole: int = Field(ge=1, le=9, default=1)
    status: MatchStatus = MatchStatus.SCHEDULED

    @property
    def is_decided(self) -> bool:
        return self.status.is_decided


class MatchScore(BaseModel):
    """Strokes for one player on one hole of one match."""

    id: str
    match_id: str
    player_id: str
    hole: int = Field(ge=1, le=9)
    score: int = Field(ge=1)


class MatchPoints(BaseModel):
    """Point split for a match. ``hole=None`` marks the aggregate row."""

    id: str
    match_id: str
    team_id: str | None = None
    hole: int | None = None
    home_points: float = 0.0
    away_points: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_aggregate(self) -> bool:
        return self.hole is None

    @property
    def total(self) -> float:
        return self.home_points + self.away_points
