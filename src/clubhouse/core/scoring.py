"""Match points from hole-by-hole scores.

Each hole is a best-ball contest on net scores: the side with the lower
best net score wins the hole for 1 point, equal best nets halve it for
0.5 each. Nine holes therefore distribute 9 points. When the winner bonus
is enabled, the side with more hole points gets one more, for 10.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from clubhouse.config import CourseSetup
from clubhouse.core.handicap import match_strokes
from clubhouse.models.league import MatchScore

logger = logging.getLogger(__name__)

STANDARD_TOTAL = 9.0
BONUS_TOTAL = 10.0

PointTotalKind = Literal["standard", "with_bonus", "unexpected"]


@dataclass
class MatchPointsResult:
    """Computed point split for one match."""

    hole_points: dict[int, tuple[float, float]] = field(default_factory=dict)
    home_hole_points: float = 0.0
    away_hole_points: float = 0.0
    home_bonus: float = 0.0
    away_bonus: float = 0.0

    @property
    def home_points(self) -> float:
        return self.home_hole_points + self.home_bonus

    @property
    def away_points(self) -> float:
        return self.away_hole_points + self.away_bonus

    @property
    def holes_decided(self) -> int:
        return len(self.hole_points)


def classify_point_total(home_points: float, away_points: float) -> PointTotalKind:
    """Label an aggregate split by its total: 9, 10, or anything else."""
    total = home_points + away_points
    if total == STANDARD_TOTAL:
        return "standard"
    if total == BONUS_TOTAL:
        return "with_bonus"
    return "unexpected"


def _best_net(
    player_ids: Iterable[str],
    hole: int,
    gross: dict[tuple[str, int], int],
    strokes: dict[str, dict[int, int]],
) -> int | None:
    nets = [
        gross[(pid, hole)] - strokes.get(pid, {}).get(hole, 0)
        for pid in player_ids
        if (pid, hole) in gross
    ]
    return min(nets) if nets else None


def calculate_match_points(
    home_player_ids: list[str],
    away_player_ids: list[str],
    handicap_indexes: dict[str, float],
    scores: Iterable[MatchScore],
    course: CourseSetup,
    *,
    winner_bonus: bool = True,
) -> MatchPointsResult:
    """Compute per-hole and total points for a match.

    A hole where either side has no score yet awards nothing and is left
    out of ``hole_points``; it is never scored as a loss.
    """
    gross = {(s.player_id, s.hole): s.score for s in scores}
    strokes = match_strokes(
        {pid: handicap_indexes.get(pid, 0.0) for pid in [*home_player_ids, *away_player_ids]},
        course,
    )

    result = MatchPointsResult()
    for hole in range(1, course.holes_per_round + 1):
        home_net = _best_net(home_player_ids, hole, gross, strokes)
        away_net = _best_net(away_player_ids, hole, gross, strokes)
        if home_net is None or away_net is None:
            continue
        if home_net < away_net:
            split = (1.0, 0.0)
        elif away_net < home_net:
            split = (0.0, 1.0)
        else:
            split = (0.5, 0.5)
        result.hole_points[hole] = split
        result.home_hole_points += split[0]
        result.away_hole_points += split[1]

    if winner_bonus and result.holes_decided == course.holes_per_round:
        if result.home_hole_points > result.away_hole_points:
            result.home_bonus = 1.0
        elif result.away_hole_points > result.home_hole_points:
            result.away_bonus = 1.0

    logger.debug(
        "match_points holes=%d home=%.1f away=%.1f",
        result.holes_decided,
        result.home_points,
        result.away_points,
    )
    return result
