"""Round-robin fixture generation.

Every team plays every other team once per cycle, using the circle method
(polygon scheduling). Each week is one set of simultaneous matches where
no team appears twice; matches in a week go off consecutive starting holes
(shotgun start on the nine).

With 10 teams one cycle is 9 weeks of 5 matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

_BYE = "BYE"


@dataclass
class Fixture:
    """A single scheduled match between two teams."""

    week_number: int
    date: datetime
    home_team_id: str
    away_team_id: str
    starting_hole: int


def generate_round_robin(
    team_ids: list[str],
    start_date: datetime,
    num_cycles: int = 1,
    holes_per_round: int = 9,
) -> list[Fixture]:
    """Generate a weekly round-robin schedule.

    Args:
        team_ids: Teams to schedule. With an odd count one team sits out each week.
        start_date: Date and tee time of week 1; later weeks follow at 7-day steps.
        num_cycles: Complete round-robin cycles. Home/away swaps on every other cycle.
        holes_per_round: Starting holes wrap after this many matches in a week.

    Returns:
        Fixtures sorted by week, then starting hole.
    """
    n = len(team_ids)
    if n < 2:
        return []

    ids = list(team_ids)
    if n % 2:
        ids.append(_BYE)
        n += 1

    fixtures: list[Fixture] = []
    week = 0

    for cycle in range(num_cycles):
        # Circle method: fix team 0, rotate the rest
        rotating = list(ids[1:])

        for _slot in range(n - 1):
            week += 1
            date = start_date + timedelta(days=7 * (week - 1))
            slot_index = 0

            for i in range(n // 2):
                if i == 0:
                    home_id, away_id = ids[0], rotating[0]
                else:
                    home_id, away_id = rotating[i], rotating[n - 1 - i]

                if cycle % 2 == 1:
                    home_id, away_id = away_id, home_id

                if _BYE in (home_id, away_id):
                    continue

                fixtures.append(
                    Fixture(
                        week_number=week,
                        date=date,
                        home_team_id=home_id,
                        away_team_id=away_id,
                        starting_hole=slot_index % holes_per_round + 1,
                    )
                )
                slot_index += 1

            rotating = [rotating[-1], *rotating[:-1]]

    return fixtures
