"""Tests for round-robin schedule generation."""

from collections import Counter
from datetime import datetime, timedelta
from itertools import combinations

from clubhouse.core.scheduler import generate_round_robin

START = datetime(2025, 4, 15, 18, 0)


def _teams(n: int) -> list[str]:
    return [f"t-{i}" for i in range(n)]


class TestRoundRobin:
    def test_ten_teams_play_nine_weeks_of_five(self):
        fixtures = generate_round_robin(_teams(10), START)
        per_week = Counter(f.week_number for f in fixtures)
        assert sorted(per_week) == list(range(1, 10))
        assert set(per_week.values()) == {5}

    def test_every_pair_meets_once(self):
        teams = _teams(10)
        fixtures = generate_round_robin(teams, START)
        pairs = Counter(frozenset((f.home_team_id, f.away_team_id)) for f in fixtures)
        assert set(pairs) == {frozenset(p) for p in combinations(teams, 2)}
        assert set(pairs.values()) == {1}

    def test_nobody_plays_twice_in_a_week(self):
        fixtures = generate_round_robin(_teams(10), START)
        for week in range(1, 10):
            playing = [
                t
                for f in fixtures
                if f.week_number == week
                for t in (f.home_team_id, f.away_team_id)
            ]
            assert len(playing) == len(set(playing))

    def test_weekly_dates_and_shotgun_holes(self):
        fixtures = generate_round_robin(_teams(10), START)
        for f in fixtures:
            assert f.date == START + timedelta(days=7 * (f.week_number - 1))
        week_one = [f.starting_hole for f in fixtures if f.week_number == 1]
        assert week_one == [1, 2, 3, 4, 5]

    def test_starting_holes_wrap(self):
        fixtures = generate_round_robin(_teams(20), START, holes_per_round=9)
        week_one = [f.starting_hole for f in fixtures if f.week_number == 1]
        assert week_one == [1, 2, 3, 4, 5, 6, 7, 8, 9, 1]

    def test_odd_count_gets_a_bye(self):
        fixtures = generate_round_robin(_teams(5), START)
        assert len(fixtures) == 10
        assert len({f.week_number for f in fixtures}) == 5
        assert all("BYE" not in (f.home_team_id, f.away_team_id) for f in fixtures)

    def test_second_cycle_swaps_home_and_away(self):
        fixtures = generate_round_robin(_teams(4), START, num_cycles=2)
        assert len(fixtures) == 12
        first, second = fixtures[:6], fixtures[6:]
        for a, b in zip(first, second, strict=True):
            assert (a.home_team_id, a.away_team_id) == (b.away_team_id, b.home_team_id)
            assert b.week_number == a.week_number + 3

    def test_too_few_teams(self):
        assert generate_round_robin(_teams(1), START) == []
        assert generate_round_robin([], START) == []
