"""Team API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from clubhouse.api.deps import BusDep, RepoDep
from clubhouse.core.event_bus import TEAM_UPDATED
from clubhouse.db.models import TeamRow

router = APIRouter(prefix="/api/teams", tags=["teams"])


class TeamRequest(BaseModel):
    """Request model for creating or renaming a team."""

    name: str = Field(min_length=1, max_length=100)


def _team_payload(team: TeamRow, include_players: bool = False) -> dict:
    payload: dict = {"id": team.id, "name": team.name}
    if include_players:
        payload["players"] = [
            {
                "id": p.id,
                "name": p.name,
                "handicap_index": p.handicap_index,
                "player_type": p.player_type,
            }
            for p in sorted(team.players, key=lambda p: p.name)
        ]
    return payload


@router.get("")
async def list_teams(repo: RepoDep) -> dict:
    """List all teams with their rosters."""
    teams = await repo.get_all_teams()
    return {"data": [_team_payload(t, include_players=True) for t in teams]}


@router.get("/{team_id}")
async def get_team(team_id: str, repo: RepoDep) -> dict:
    """Get a single team with its players."""
    team = await repo.get_team(team_id)
    if not team:
        raise HTTPException(404, "Team not found")
    return {"data": _team_payload(team, include_players=True)}


@router.post("", status_code=201)
async def create_team(body: TeamRequest, repo: RepoDep, bus: BusDep) -> dict:
    name = body.name.strip()
    if await repo.get_team_by_name(name):
        raise HTTPException(409, f"Team {name!r} already exists")
    team = await repo.create_team(name)
    await repo.session.commit()
    await bus.publish(TEAM_UPDATED, {"team_id": team.id, "action": "created"})
    return {"data": _team_payload(team)}


@router.patch("/{team_id}")
async def rename_team(team_id: str, body: TeamRequest, repo: RepoDep, bus: BusDep) -> dict:
    name = body.name.strip()
    existing = await repo.get_team_by_name(name)
    if existing and existing.id != team_id:
        raise HTTPException(409, f"Team {name!r} already exists")
    team = await repo.rename_team(team_id, name)
    if not team:
        raise HTTPException(404, "Team not found")
    await repo.session.commit()
    await bus.publish(TEAM_UPDATED, {"team_id": team.id, "action": "renamed"})
    return {"data": _team_payload(team)}


@router.delete("/{team_id}")
async def delete_team(team_id: str, repo: RepoDep, bus: BusDep) -> dict:
    """Delete a team that has no scheduled matches. Its players become free agents."""
    if await repo.team_has_matches(team_id):
        raise HTTPException(409, "Team is on the schedule; delete its matches first")
    if not await repo.delete_team(team_id):
        raise HTTPException(404, "Team not found")
    await repo.session.commit()
    await bus.publish(TEAM_UPDATED, {"team_id": team_id, "action": "deleted"})
    return {"data": {"id": team_id, "deleted": True}}
