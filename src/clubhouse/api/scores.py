"""Hole score API endpoints.

Posting scores replaces every score of the match, recomputes the match
points from them, and stores the per-hole and aggregate point rows.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from clubhouse.api.deps import BusDep, RepoDep, SettingsDep
from clubhouse.core.event_bus import SCORE_UPDATED, STANDINGS_UPDATED
from clubhouse.core.scoring import calculate_match_points
from clubhouse.db.models import MatchScoreRow
from clubhouse.db.repository import to_score

router = APIRouter(prefix="/api/scores", tags=["scores"])
logger = logging.getLogger(__name__)


class ScoreEntry(BaseModel):
    player_id: str
    hole: int = Field(ge=1, le=9)
    score: int = Field(ge=1, le=12)


class SubmitScoresRequest(BaseModel):
    match_id: str
    scores: list[ScoreEntry]

    @model_validator(mode="after")
    def _one_score_per_hole(self) -> SubmitScoresRequest:
        seen: set[tuple[str, int]] = set()
        for entry in self.scores:
            key = (entry.player_id, entry.hole)
            if key in seen:
                raise ValueError(f"duplicate score for player {entry.player_id} hole {entry.hole}")
            seen.add(key)
        return self


def _score_payload(row: MatchScoreRow) -> dict:
    return {
        "id": row.id,
        "match_id": row.match_id,
        "player_id": row.player_id,
        "hole": row.hole,
        "score": row.score,
    }


@router.get("")
async def get_scores(match_id: str, repo: RepoDep) -> dict:
    """Scores for one match, ordered by player then hole."""
    if not await repo.get_match(match_id):
        raise HTTPException(404, "Match not found")
    rows = await repo.get_scores_for_match(match_id)
    return {"data": [_score_payload(r) for r in rows]}


@router.post("")
async def submit_scores(
    body: SubmitScoresRequest,
    repo: RepoDep,
    bus: BusDep,
    settings: SettingsDep,
) -> dict:
    match = await repo.get_match(body.match_id)
    if not match:
        raise HTTPException(404, "Match not found")

    course = settings.course()
    if any(entry.hole > course.holes_per_round for entry in body.scores):
        raise HTTPException(422, f"holes run from 1 to {course.holes_per_round}")

    lineup = await repo.get_match_lineup(match)
    side_of = {
        player.id: team_id for team_id, entries in lineup.items() for player, _ in entries
    }
    players = {p.id: p for p in await repo.get_players_by_ids(e.player_id for e in body.scores)}
    sides: dict[str, list[str]] = {match.home_team_id: [], match.away_team_id: []}
    for entry in body.scores:
        player = players.get(entry.player_id)
        if player is None:
            raise HTTPException(404, f"Player {entry.player_id} not found")
        side = side_of.get(player.id)
        if side is None:
            raise HTTPException(
                422, f"Player {player.name} is not playing for either team in this match"
            )
        if entry.player_id not in sides[side]:
            sides[side].append(entry.player_id)

    rows = await repo.replace_scores(
        match.id, [(e.player_id, e.hole, e.score) for e in body.scores]
    )
    result = calculate_match_points(
        sides[match.home_team_id],
        sides[match.away_team_id],
        {pid: p.handicap_index for pid, p in players.items()},
        [to_score(r) for r in rows],
        course,
        winner_bonus=settings.winner_bonus_point,
    )
    await repo.save_match_points(
        match.id,
        match.home_team_id,
        result.home_points,
        result.away_points,
        result.hole_points,
    )
    logger.info(
        "scores_saved match=%s scores=%d holes_decided=%d points=%.1f-%.1f",
        match.id,
        len(rows),
        result.holes_decided,
        result.home_points,
        result.away_points,
    )

    await repo.session.commit()
    await bus.publish(SCORE_UPDATED, {"match_id": match.id})
    await bus.publish(STANDINGS_UPDATED, {"match_id": match.id})
    return {
        "data": {
            "match_id": match.id,
            "home_points": result.home_points,
            "away_points": result.away_points,
            "hole_points": {
                str(hole): {"home": home, "away": away}
                for hole, (home, away) in sorted(result.hole_points.items())
            },
        }
    }
