"""Seed a Clubhouse league: teams, players, and a round-robin schedule.

Usage:
    python scripts/seed_league.py                     # seed with week 1 on the next Tuesday
    python scripts/seed_league.py 2025-04-15T18:00    # seed with an explicit week-1 tee time

Safe to run repeatedly: does nothing if teams already exist.
Uses DATABASE_URL, defaulting to a local SQLite file (clubhouse.db).
"""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta

from clubhouse.config import Settings
from clubhouse.core.scheduler import generate_round_robin
from clubhouse.db.engine import create_engine, create_tables, get_session
from clubhouse.db.repository import Repository

# Team name -> [(player name, handicap index)]
ROSTER: dict[str, list[tuple[str, float]]] = {
    "Team 1": [("Nolan", 11.3), ("Brent", 12.0)],
    "Team 2": [("Hugo", 11.8), ("Otis", 17.2)],
    "Team 3": [("Ada", 40.6), ("Alli", 30.0)],
    "Team 4": [("Bram", 13.4), ("Jake", 16.7)],
    "Team 5": [("Silas", 11.9), ("Rob", 18.1)],
    "Team 6": [("Miles", 12.6), ("Trev", 16.0)],
    "Team 7": [("Drew", 10.6), ("Ryan", 13.9)],
    "Team 8": [("Abe", 7.3), ("Jonah", 21.4)],
    "Team 9": [("Clay", 12.5), ("Wade", 15.0)],
    "Team 10": [("Brett", 10.3), ("Tony", 14.1)],
}


def _next_tuesday_evening() -> datetime:
    today = datetime.now().replace(hour=18, minute=0, second=0, microsecond=0)
    return today + timedelta(days=(1 - today.weekday()) % 7 or 7)


async def seed(start_date: datetime) -> None:
    engine = create_engine(Settings().database_url)
    await create_tables(engine)

    async with get_session(engine) as session:
        repo = Repository(session)
        if await repo.get_all_teams():
            print("Teams already exist; nothing to seed.")
            await engine.dispose()
            return

        team_ids: list[str] = []
        for team_name, players in ROSTER.items():
            team = await repo.create_team(team_name)
            team_ids.append(team.id)
            for player_name, index in players:
                await repo.create_player(player_name, handicap_index=index, team_id=team.id)
            print(f"  {team_name}: {', '.join(name for name, _ in players)}")

        fixtures = generate_round_robin(team_ids, start_date=start_date)
        for f in fixtures:
            await repo.create_match(
                date=f.date,
                week_number=f.week_number,
                home_team_id=f.home_team_id,
                away_team_id=f.away_team_id,
                starting_hole=f.starting_hole,
            )

    weeks = max((f.week_number for f in fixtures), default=0)
    print(f"Seeded {len(ROSTER)} teams and {len(fixtures)} matches over {weeks} weeks.")
    await engine.dispose()


def main() -> None:
    if len(sys.argv) > 1:
        try:
            start = datetime.fromisoformat(sys.argv[1])
        except ValueError:
            print(f"ERROR: could not parse start date {sys.argv[1]!r}")
            sys.exit(1)
    else:
        start = _next_tuesday_evening()
    asyncio.run(seed(start))


if __name__ == "__main__":
    main()
