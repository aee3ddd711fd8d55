"""Match points API: read stored splits and record manually entered ones."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, field_validator

from clubhouse.api.deps import BusDep, RepoDep
from clubhouse.core.event_bus import STANDINGS_UPDATED
from clubhouse.core.scoring import classify_point_total
from clubhouse.db.models import MatchPointsRow

router = APIRouter(prefix="/api/match-points", tags=["match-points"])
logger = logging.getLogger(__name__)


class PointSplit(BaseModel):
    home: float = Field(ge=0)
    away: float = Field(ge=0)


class MatchPointsRequest(BaseModel):
    match_id: str
    total_points: PointSplit
    hole_points: dict[int, PointSplit] = Field(default_factory=dict)

    @field_validator("hole_points")
    @classmethod
    def _holes_on_the_nine(cls, value: dict[int, PointSplit]) -> dict[int, PointSplit]:
        bad = sorted(h for h in value if not 1 <= h <= 9)
        if bad:
            raise ValueError(f"hole numbers must be 1-9, got {bad}")
        return value


def _points_payload(row: MatchPointsRow) -> dict:
    return {
        "id": row.id,
        "match_id": row.match_id,
        "team_id": row.team_id,
        "hole": row.hole,
        "home_points": row.home_points,
        "away_points": row.away_points,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


@router.get("")
async def get_match_points(match_id: str, repo: RepoDep) -> dict:
    """Every point row of a match: aggregate rows first, then per hole.

    ``aggregate`` is the split standings count for the match, picked from
    the aggregate rows the same way standings pick it.
    """
    if not await repo.get_match(match_id):
        raise HTTPException(404, "Match not found")
    rows = await repo.get_match_points(match_id)
    canonical = await repo.get_aggregate_match_points(match_id)
    aggregate = None
    if canonical is not None:
        aggregate = {
            "id": canonical.id,
            "home_points": canonical.home_points,
            "away_points": canonical.away_points,
            "total": canonical.total,
        }
    return {"data": [_points_payload(r) for r in rows], "aggregate": aggregate}


@router.post("")
async def save_match_points(body: MatchPointsRequest, repo: RepoDep, bus: BusDep) -> dict:
    """Store a point split as entered.

    Totals other than 9 or 10 are stored unchanged and reported back in
    ``warning``; standings will exclude the match until it is corrected.
    """
    match = await repo.get_match(body.match_id)
    if not match:
        raise HTTPException(404, "Match not found")

    home, away = body.total_points.home, body.total_points.away
    aggregate = await repo.save_match_points(
        match.id,
        match.home_team_id,
        home,
        away,
        {hole: (split.home, split.away) for hole, split in body.hole_points.items()},
    )

    warning = None
    if classify_point_total(home, away) == "unexpected":
        warning = f"Total of {home + away:g} points is neither 9 nor 10"
        logger.warning("match_points_unexpected_total match=%s home=%s away=%s", match.id, home, away)

    await repo.session.commit()
    await bus.publish(STANDINGS_UPDATED, {"match_id": match.id})
    return {"data": _points_payload(aggregate), "warning": warning}
