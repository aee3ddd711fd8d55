"""Player API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from clubhouse.api.deps import BusDep, RepoDep
from clubhouse.core.event_bus import PLAYER_UPDATED
from clubhouse.core.handicap import MAX_HANDICAP_INDEX, MIN_HANDICAP_INDEX
from clubhouse.db.models import PlayerRow
from clubhouse.models.league import PlayerType

router = APIRouter(prefix="/api/players", tags=["players"])


class PlayerCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    handicap_index: float = Field(ge=MIN_HANDICAP_INDEX, le=MAX_HANDICAP_INDEX, default=0.0)
    team_id: str | None = None
    player_type: PlayerType = PlayerType.PRIMARY


class PlayerUpdateRequest(BaseModel):
    """Partial update; omitted fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    handicap_index: float | None = Field(
        default=None, ge=MIN_HANDICAP_INDEX, le=MAX_HANDICAP_INDEX
    )
    team_id: str | None = None
    player_type: PlayerType | None = None


def _player_payload(player: PlayerRow) -> dict:
    return {
        "id": player.id,
        "name": player.name,
        "handicap_index": player.handicap_index,
        "team_id": player.team_id,
        "player_type": player.player_type,
    }


@router.get("")
async def list_players(repo: RepoDep, team_id: str | None = None) -> dict:
    players = await repo.get_players(team_id=team_id)
    return {"data": [_player_payload(p) for p in players]}


@router.get("/{player_id}")
async def get_player(player_id: str, repo: RepoDep) -> dict:
    player = await repo.get_player(player_id)
    if not player:
        raise HTTPException(404, "Player not found")
    return {"data": _player_payload(player)}


@router.post("", status_code=201)
async def create_player(body: PlayerCreateRequest, repo: RepoDep, bus: BusDep) -> dict:
    if body.team_id and not await repo.get_team(body.team_id):
        raise HTTPException(404, "Team not found")
    player = await repo.create_player(
        name=body.name.strip(),
        handicap_index=body.handicap_index,
        team_id=body.team_id,
        player_type=body.player_type,
    )
    await repo.session.commit()
    await bus.publish(PLAYER_UPDATED, {"player_id": player.id, "action": "created"})
    return {"data": _player_payload(player)}


@router.patch("/{player_id}")
async def update_player(
    player_id: str, body: PlayerUpdateRequest, repo: RepoDep, bus: BusDep
) -> dict:
    # team_id may be cleared with an explicit null; other fields may not
    changes = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key == "team_id"
    }
    if changes.get("team_id") and not await repo.get_team(changes["team_id"]):
        raise HTTPException(404, "Team not found")
    player = await repo.update_player(player_id, **changes)
    if not player:
        raise HTTPException(404, "Player not found")
    await repo.session.commit()
    await bus.publish(PLAYER_UPDATED, {"player_id": player.id, "action": "updated"})
    return {"data": _player_payload(player)}


@router.delete("/{player_id}")
async def delete_player(player_id: str, repo: RepoDep, bus: BusDep) -> dict:
    if await repo.player_has_scores(player_id):
        raise HTTPException(409, "Player has recorded scores and cannot be deleted")
    if not await repo.delete_player(player_id):
        raise HTTPException(404, "Player not found")
    await repo.session.commit()
    await bus.publish(PLAYER_UPDATED, {"player_id": player_id, "action": "deleted"})
    return {"data": {"id": player_id, "deleted": True}}
