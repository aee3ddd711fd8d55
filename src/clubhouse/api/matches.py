"""Match (fixture) API endpoints."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from clubhouse.api.deps import BusDep, RepoDep
from clubhouse.core.event_bus import MATCH_UPDATED, STANDINGS_UPDATED
from clubhouse.db.models import MatchRow
from clubhouse.db.repository import Repository
from clubhouse.models.league import MatchStatus, PlayerType, normalize_status

router = APIRouter(prefix="/api/matches", tags=["matches"])
logger = logging.getLogger(__name__)


class MatchCreateRequest(BaseModel):
    date: datetime
    week_number: int = Field(ge=1)
    home_team_id: str
    away_team_id: str
    starting_hole: int = Field(ge=1, le=9, default=1)
    status: MatchStatus = MatchStatus.SCHEDULED

    @model_validator(mode="after")
    def _distinct_teams(self) -> MatchCreateRequest:
        if self.home_team_id == self.away_team_id:
            raise ValueError("a team cannot play itself")
        return self


class MatchUpdateRequest(BaseModel):
    """Partial update; omitted fields are left alone."""

    date: datetime | None = None
    week_number: int | None = Field(default=None, ge=1)
    starting_hole: int | None = Field(default=None, ge=1, le=9)
    status: MatchStatus | None = None


def match_payload(match: MatchRow) -> dict:
    return {
        "id": match.id,
        "date": match.date.isoformat(),
        "week_number": match.week_number,
        "home_team_id": match.home_team_id,
        "away_team_id": match.away_team_id,
        "starting_hole": match.starting_hole,
        "status": normalize_status(match.status).value,
    }


@router.get("")
async def list_matches(
    repo: RepoDep,
    week: int | None = None,
    status: MatchStatus | None = None,
) -> dict:
    """List matches by week and starting hole, optionally filtered."""
    matches = await repo.get_matches(week_number=week)
    payload = [match_payload(m) for m in matches]
    if status is not None:
        payload = [m for m in payload if m["status"] == status.value]
    return {"data": payload}


@router.get("/{match_id}")
async def get_match(match_id: str, repo: RepoDep) -> dict:
    match = await repo.get_match(match_id)
    if not match:
        raise HTTPException(404, "Match not found")
    return {"data": match_payload(match)}


@router.post("", status_code=201)
async def create_match(body: MatchCreateRequest, repo: RepoDep, bus: BusDep) -> dict:
    for team_id in (body.home_team_id, body.away_team_id):
        if not await repo.get_team(team_id):
            raise HTTPException(404, f"Team {team_id} not found")
    match = await repo.create_match(
        date=body.date,
        week_number=body.week_number,
        home_team_id=body.home_team_id,
        away_team_id=body.away_team_id,
        starting_hole=body.starting_hole,
        status=body.status,
    )
    await repo.session.commit()
    await bus.publish(MATCH_UPDATED, {"match_id": match.id, "action": "created"})
    return {"data": match_payload(match)}


@router.patch("/{match_id}")
async def update_match(match_id: str, body: MatchUpdateRequest, repo: RepoDep, bus: BusDep) -> dict:
    """Reschedule a match or move it through its lifecycle.

    A status change can decide or un-decide a match, so it also tells
    standings viewers to refresh.
    """
    existing = await repo.get_match(match_id)
    if not existing:
        raise HTTPException(404, "Match not found")
    previous_status = normalize_status(existing.status)

    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    match = await repo.update_match(match_id, **changes)
    if not match:
        raise HTTPException(404, "Match not found")

    await repo.session.commit()
    await bus.publish(MATCH_UPDATED, {"match_id": match_id, "action": "updated"})
    new_status = normalize_status(match.status)
    if new_status != previous_status:
        logger.info("match_status_changed match=%s from=%s to=%s", match_id, previous_status, new_status)
        await bus.publish(STANDINGS_UPDATED, {"match_id": match_id, "status": new_status.value})
    return {"data": match_payload(match)}


@router.delete("/{match_id}")
async def delete_match(match_id: str, repo: RepoDep, bus: BusDep) -> dict:
    """Delete a match together with its scores and points."""
    match = await repo.get_match(match_id)
    if not match:
        raise HTTPException(404, "Match not found")
    was_decided = normalize_status(match.status).is_decided
    await repo.delete_match(match_id)
    await repo.session.commit()
    await bus.publish(MATCH_UPDATED, {"match_id": match_id, "action": "deleted"})
    if was_decided:
        await bus.publish(STANDINGS_UPDATED, {"match_id": match_id, "status": "deleted"})
    return {"data": {"id": match_id, "deleted": True}}


class PlayerAssignment(BaseModel):
    original_player_id: str
    substitute_player_id: str
    team_id: str


class MatchPlayersRequest(BaseModel):
    """The full set of substitutions for a match; an empty list clears them."""

    player_assignments: list[PlayerAssignment]

    @model_validator(mode="after")
    def _distinct_players(self) -> MatchPlayersRequest:
        originals: set[str] = set()
        substitutes: set[str] = set()
        for a in self.player_assignments:
            if a.original_player_id == a.substitute_player_id:
                raise ValueError(f"player {a.original_player_id} cannot substitute for themselves")
            if a.original_player_id in originals:
                raise ValueError(f"player {a.original_player_id} is replaced more than once")
            if a.substitute_player_id in substitutes:
                raise ValueError(f"player {a.substitute_player_id} substitutes more than once")
            originals.add(a.original_player_id)
            substitutes.add(a.substitute_player_id)
        return self


async def _lineup_payload(match: MatchRow, repo: Repository) -> dict:
    lineup = await repo.get_match_lineup(match)

    def side(team_id: str) -> list[dict]:
        return [
            {
                "player_id": player.id,
                "name": player.name,
                "handicap_index": player.handicap_index,
                "team_id": team_id,
                "is_substitute": replaces is not None,
                "replaces": replaces,
            }
            for player, replaces in lineup[team_id]
        ]

    substitutions = await repo.get_substitutions(match.id)
    return {
        "match_id": match.id,
        "home_players": side(match.home_team_id),
        "away_players": side(match.away_team_id),
        "substitutions": [
            {
                "team_id": s.team_id,
                "original_player_id": s.original_player_id,
                "substitute_player_id": s.substitute_player_id,
            }
            for s in substitutions
        ],
    }


@router.get("/{match_id}/players")
async def get_match_players(match_id: str, repo: RepoDep) -> dict:
    """Who plays for each side, with substitutes swapped in."""
    match = await repo.get_match(match_id)
    if not match:
        raise HTTPException(404, "Match not found")
    return {"data": await _lineup_payload(match, repo)}


@router.put("/{match_id}/players")
async def set_match_players(
    match_id: str, body: MatchPlayersRequest, repo: RepoDep, bus: BusDep
) -> dict:
    """Replace the substitutions of one match.

    The original player must be on the PRIMARY roster of the named team.
    The substitute may be a free agent or a non-PRIMARY player of the same
    team, but never a player already in either lineup or on the opposing team.
    """
    match = await repo.get_match(match_id)
    if not match:
        raise HTTPException(404, "Match not found")
    match_teams = (match.home_team_id, match.away_team_id)

    ids = {a.original_player_id for a in body.player_assignments}
    ids |= {a.substitute_player_id for a in body.player_assignments}
    players = {p.id: p for p in await repo.get_players_by_ids(ids)}

    for a in body.player_assignments:
        if a.team_id not in match_teams:
            raise HTTPException(400, f"Team {a.team_id} is not playing in this match")
        original = players.get(a.original_player_id)
        if (
            original is None
            or original.team_id != a.team_id
            or original.player_type.upper() != PlayerType.PRIMARY.value
        ):
            raise HTTPException(
                400,
                f"Original player {a.original_player_id} is not on the roster of team {a.team_id}",
            )
        substitute = players.get(a.substitute_player_id)
        if substitute is None:
            raise HTTPException(400, f"Substitute player {a.substitute_player_id} not found")
        if substitute.team_id in match_teams and (
            substitute.team_id != a.team_id
            or substitute.player_type.upper() == PlayerType.PRIMARY.value
        ):
            raise HTTPException(
                400, f"Player {substitute.name} is already playing in this match"
            )

    assignments = [
        (a.team_id, a.original_player_id, a.substitute_player_id) for a in body.player_assignments
    ]
    await repo.replace_substitutions(match_id, assignments)
    logger.info("match_players_set match=%s substitutions=%d", match_id, len(assignments))

    await repo.session.commit()
    await bus.publish(MATCH_UPDATED, {"match_id": match_id, "action": "players_updated"})
    return {"data": await _lineup_payload(match, repo)}
