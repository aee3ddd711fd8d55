"""Report match-points data problems without changing anything.

Lists every decided match the team standings would exclude or flag:
missing aggregate rows, duplicate aggregate rows, and totals that are
neither 9 nor 10. Also lists partial rounds from the player standings.
Fixing the data is left to a human; this script never writes.

Usage:
    python scripts/audit_match_points.py
"""

from __future__ import annotations

import asyncio
import sys

from clubhouse.config import Settings
from clubhouse.core.standings import load_player_standings, load_team_standings
from clubhouse.db.engine import create_engine, get_session
from clubhouse.db.repository import Repository
from clubhouse.errors import StandingsUnavailableError


async def audit() -> int:
    settings = Settings()
    engine = create_engine(settings.database_url)

    try:
        async with get_session(engine) as session:
            repo = Repository(session)
            teams = await load_team_standings(repo)
            players = await load_player_standings(repo, settings.course())
    except StandingsUnavailableError as exc:
        print(f"ERROR: {exc} ({exc.__cause__})")
        await engine.dispose()
        return 2

    await engine.dispose()

    warnings = [*teams.warnings, *players.warnings]
    if not warnings:
        print("No data-quality problems found.")
        return 0

    print(f"{len(warnings)} problem(s):")
    for w in warnings:
        where = f"match={w.match_id}"
        if w.player_id:
            where += f" player={w.player_id}"
        print(f"  [{w.kind}] {where}: {w.message}")
    return 1


def main() -> None:
    sys.exit(asyncio.run(audit()))


if __name__ == "__main__":
    main()
