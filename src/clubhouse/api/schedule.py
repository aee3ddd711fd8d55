"""Schedule API: weekly view and round-robin generation."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from clubhouse.api.deps import BusDep, RepoDep, SettingsDep
from clubhouse.api.matches import match_payload
from clubhouse.core.event_bus import MATCH_UPDATED, STANDINGS_UPDATED
from clubhouse.core.scheduler import generate_round_robin

router = APIRouter(prefix="/api/schedule", tags=["schedule"])
logger = logging.getLogger(__name__)


class GenerateScheduleRequest(BaseModel):
    start_date: datetime
    num_cycles: int = Field(ge=1, le=4, default=1)
    replace: bool = False


@router.get("")
async def get_schedule(repo: RepoDep) -> dict:
    """Matches grouped by week, with team names resolved."""
    teams = {t.id: t.name for t in await repo.get_all_teams()}
    weeks: dict[int, list[dict]] = defaultdict(list)
    for match in await repo.get_matches():
        entry = match_payload(match)
        entry["home_team_name"] = teams.get(match.home_team_id, "")
        entry["away_team_name"] = teams.get(match.away_team_id, "")
        weeks[match.week_number].append(entry)
    return {
        "data": [{"week_number": week, "matches": weeks[week]} for week in sorted(weeks)],
    }


@router.post("/generate", status_code=201)
async def generate_schedule(
    body: GenerateScheduleRequest,
    repo: RepoDep,
    bus: BusDep,
    settings: SettingsDep,
) -> dict:
    """Create a round-robin schedule for every team.

    Refuses to touch an existing schedule unless ``replace`` is set, in
    which case all matches, scores, and points are cleared first.
    """
    existing = await repo.count_matches()
    if existing and not body.replace:
        raise HTTPException(409, f"{existing} matches already scheduled; pass replace=true")

    teams = await repo.get_all_teams()
    if len(teams) < 2:
        raise HTTPException(400, "At least two teams are needed to build a schedule")

    if existing:
        cleared = await repo.delete_all_matches()
        logger.info("schedule_cleared matches=%d", cleared)

    fixtures = generate_round_robin(
        [t.id for t in teams],
        start_date=body.start_date,
        num_cycles=body.num_cycles,
        holes_per_round=settings.holes_per_round,
    )
    created = [
        await repo.create_match(
            date=f.date,
            week_number=f.week_number,
            home_team_id=f.home_team_id,
            away_team_id=f.away_team_id,
            starting_hole=f.starting_hole,
        )
        for f in fixtures
    ]
    logger.info("schedule_generated teams=%d matches=%d", len(teams), len(created))

    await repo.session.commit()
    await bus.publish(MATCH_UPDATED, {"action": "schedule_generated", "count": len(created)})
    if existing:
        await bus.publish(STANDINGS_UPDATED, {"action": "schedule_replaced"})
    return {"data": [match_payload(m) for m in created]}
