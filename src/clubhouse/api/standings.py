"""Standings API endpoints.

Both endpoints recompute from stored data on every request. A store
failure is reported as 503 with ``retry: true``; the client shows a retry
button rather than a partial table.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from clubhouse.api.deps import RepoDep, SettingsDep
from clubhouse.core.standings import load_player_standings, load_team_standings
from clubhouse.errors import StandingsUnavailableError

router = APIRouter(prefix="/api", tags=["standings"])


def _unavailable(exc: StandingsUnavailableError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc), "retry": True})


@router.get("/standings")
async def get_standings(repo: RepoDep) -> dict:
    """Team standings: records, league points, and weekly drill-down."""
    try:
        report = await load_team_standings(repo)
    except StandingsUnavailableError as exc:
        return _unavailable(exc)
    return report.model_dump(by_alias=True)


@router.get("/player-standings")
async def get_player_standings(repo: RepoDep, settings: SettingsDep) -> dict:
    """Gross and net totals for every PRIMARY player."""
    try:
        report = await load_player_standings(repo, settings.course())
    except StandingsUnavailableError as exc:
        return _unavailable(exc)
    return report.model_dump(by_alias=True)
