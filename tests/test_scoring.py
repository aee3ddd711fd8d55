"""Tests for best-ball match points."""

import pytest

from clubhouse.config import CourseSetup
from clubhouse.core.scoring import calculate_match_points, classify_point_total
from clubhouse.models.league import MatchScore


def _card(player_id: str, strokes: dict[int, int]) -> list[MatchScore]:
    return [
        MatchScore(id=f"{player_id}-{hole}", match_id="m-1", player_id=player_id, hole=hole, score=s)
        for hole, s in strokes.items()
    ]


def _flat(score: int, holes=range(1, 10)) -> dict[int, int]:
    return {hole: score for hole in holes}


SCRATCH = {"h1": 0.0, "h2": 0.0, "a1": 0.0, "a2": 0.0}


class TestClassifyTotal:
    @pytest.mark.parametrize(
        ("home", "away", "kind"),
        [
            (5, 4, "standard"),
            (4.5, 4.5, "standard"),
            (7, 3, "with_bonus"),
            (6, 6, "unexpected"),
            (0, 0, "unexpected"),
        ],
    )
    def test_kinds(self, home, away, kind):
        assert classify_point_total(home, away) == kind


class TestCalculateMatchPoints:
    def test_holes_and_winner_bonus(self, course: CourseSetup):
        away = {**_flat(5, range(1, 6)), 6: 4, 7: 4, 8: 3, 9: 3}
        scores = _card("h1", _flat(4)) + _card("a1", away)

        result = calculate_match_points(["h1"], ["a1"], SCRATCH, scores, course)

        assert result.home_hole_points == 6.0
        assert result.away_hole_points == 3.0
        assert result.home_bonus == 1.0
        assert (result.home_points, result.away_points) == (7.0, 3.0)
        assert result.hole_points[6] == (0.5, 0.5)
        assert result.hole_points[9] == (0.0, 1.0)

    def test_bonus_disabled(self, course: CourseSetup):
        scores = _card("h1", _flat(4)) + _card("a1", _flat(5))
        result = calculate_match_points(
            ["h1"], ["a1"], SCRATCH, scores, course, winner_bonus=False
        )
        assert (result.home_points, result.away_points) == (9.0, 0.0)

    def test_halved_match_gets_no_bonus(self, course: CourseSetup):
        scores = _card("h1", _flat(4)) + _card("a1", _flat(4))
        result = calculate_match_points(["h1"], ["a1"], SCRATCH, scores, course)
        assert (result.home_points, result.away_points) == (4.5, 4.5)

    def test_best_ball_counts(self, course: CourseSetup):
        scores = _card("h1", _flat(6)) + _card("h2", _flat(4)) + _card("a1", _flat(5))
        result = calculate_match_points(["h1", "h2"], ["a1"], SCRATCH, scores, course)
        assert result.home_hole_points == 9.0

    def test_strokes_decide_holes(self, course: CourseSetup):
        # 20.0 plays off 7 against −2: a stroke on every hole turns 5s into net 4s.
        scores = _card("h1", _flat(5)) + _card("a1", _flat(4))
        result = calculate_match_points(
            ["h1"], ["a1"], {"h1": 20.0, "a1": 0.0}, scores, course
        )
        assert (result.home_points, result.away_points) == (4.5, 4.5)

    def test_unscored_holes_award_nothing(self, course: CourseSetup):
        scores = _card("h1", _flat(4)) + _card("a1", _flat(5, range(1, 4)))
        result = calculate_match_points(["h1"], ["a1"], SCRATCH, scores, course)
        assert result.holes_decided == 3
        assert sorted(result.hole_points) == [1, 2, 3]
        assert (result.home_points, result.away_points) == (3.0, 0.0)

    def test_no_scores(self, course: CourseSetup):
        result = calculate_match_points(["h1"], ["a1"], SCRATCH, [], course)
        assert result.holes_decided == 0
        assert result.home_points == result.away_points == 0.0
